"""
secretsm - work with AWS Secrets Manager from the command line.

Features:
- get: List all secrets, or print one secret's key/value payload
- set: Add, overwrite or remove keys of a secret's payload (key=value / key-)
- compare: Show the keys whose values differ between two secrets
- keys: Show the keys stored in a secret

Requires: AWS credentials and a region (--region, AWS_REGION or config file)
"""

__version__ = "0.1.0"
