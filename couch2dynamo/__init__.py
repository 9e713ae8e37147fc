"""couch2dynamo - copies every CouchDB database into DynamoDB tables."""

__version__ = "1.0.0"
