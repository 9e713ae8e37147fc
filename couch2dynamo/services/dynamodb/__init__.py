"""DynamoDB destination - table provisioning and item writes."""
