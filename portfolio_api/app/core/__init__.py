SERVICE_NAME = "portfolio-api"
