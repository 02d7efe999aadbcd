# Static lookup data
