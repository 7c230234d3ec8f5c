# Billing calculation services
