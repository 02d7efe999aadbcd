"""
Country dial-code registry used by the phone field of a contact.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Country:
    name: str
    code: str
    dial_code: str
    flag: str


COUNTRIES: tuple[Country, ...] = (
    Country("India", "IN", "+91", "🇮🇳"),
    Country("United States", "US", "+1", "🇺🇸"),
    Country("United Kingdom", "GB", "+44", "🇬🇧"),
    Country("Canada", "CA", "+1", "🇨🇦"),
    Country("Australia", "AU", "+61", "🇦🇺"),
    Country("Germany", "DE", "+49", "🇩🇪"),
    Country("France", "FR", "+33", "🇫🇷"),
    Country("Japan", "JP", "+81", "🇯🇵"),
    Country("China", "CN", "+86", "🇨🇳"),
    Country("Brazil", "BR", "+55", "🇧🇷"),
    Country("Mexico", "MX", "+52", "🇲🇽"),
    Country("Russia", "RU", "+7", "🇷🇺"),
    Country("South Africa", "ZA", "+27", "🇿🇦"),
    Country("Italy", "IT", "+39", "🇮🇹"),
    Country("Spain", "ES", "+34", "🇪🇸"),
    Country("Netherlands", "NL", "+31", "🇳🇱"),
    Country("Belgium", "BE", "+32", "🇧🇪"),
    Country("Sweden", "SE", "+46", "🇸🇪"),
    Country("Norway", "NO", "+47", "🇳🇴"),
    Country("Denmark", "DK", "+45", "🇩🇰"),
    Country("Finland", "FI", "+358", "🇫🇮"),
    Country("Poland", "PL", "+48", "🇵🇱"),
    Country("Austria", "AT", "+43", "🇦🇹"),
    Country("Switzerland", "CH", "+41", "🇨🇭"),
    Country("Portugal", "PT", "+351", "🇵🇹"),
    Country("Greece", "GR", "+30", "🇬🇷"),
    Country("Ireland", "IE", "+353", "🇮🇪"),
    Country("New Zealand", "NZ", "+64", "🇳🇿"),
    Country("Singapore", "SG", "+65", "🇸🇬"),
    Country("Hong Kong", "HK", "+852", "🇭🇰"),
    Country("South Korea", "KR", "+82", "🇰🇷"),
    Country("Taiwan", "TW", "+886", "🇹🇼"),
    Country("Thailand", "TH", "+66", "🇹🇭"),
    Country("Malaysia", "MY", "+60", "🇲🇾"),
    Country("Philippines", "PH", "+63", "🇵🇭"),
    Country("Indonesia", "ID", "+62", "🇮🇩"),
    Country("Vietnam", "VN", "+84", "🇻🇳"),
    Country("Pakistan", "PK", "+92", "🇵🇰"),
    Country("Bangladesh", "BD", "+880", "🇧🇩"),
    Country("Sri Lanka", "LK", "+94", "🇱🇰"),
    Country("Nepal", "NP", "+977", "🇳🇵"),
    Country("United Arab Emirates", "AE", "+971", "🇦🇪"),
    Country("Saudi Arabia", "SA", "+966", "🇸🇦"),
    Country("Qatar", "QA", "+974", "🇶🇦"),
    Country("Kuwait", "KW", "+965", "🇰🇼"),
    Country("Bahrain", "BH", "+973", "🇧🇭"),
    Country("Oman", "OM", "+968", "🇴🇲"),
    Country("Israel", "IL", "+972", "🇮🇱"),
    Country("Turkey", "TR", "+90", "🇹🇷"),
    Country("Egypt", "EG", "+20", "🇪🇬"),
    Country("Nigeria", "NG", "+234", "🇳🇬"),
    Country("Kenya", "KE", "+254", "🇰🇪"),
    Country("Ghana", "GH", "+233", "🇬🇭"),
    Country("Morocco", "MA", "+212", "🇲🇦"),
    Country("Argentina", "AR", "+54", "🇦🇷"),
    Country("Chile", "CL", "+56", "🇨🇱"),
    Country("Colombia", "CO", "+57", "🇨🇴"),
    Country("Peru", "PE", "+51", "🇵🇪"),
    Country("Venezuela", "VE", "+58", "🇻🇪"),
)

DEFAULT_COUNTRY_CODE = "IN"


def get_country_by_dial_code(dial_code: str) -> Optional[Country]:
    """First country with this dial code (``+1`` resolves to the United States)."""
    return next((c for c in COUNTRIES if c.dial_code == dial_code), None)


def get_country_by_code(code: str) -> Optional[Country]:
    code = (code or "").strip().upper()
    return next((c for c in COUNTRIES if c.code == code), None)


def get_default_country() -> Country:
    return get_country_by_code(DEFAULT_COUNTRY_CODE) or COUNTRIES[0]
