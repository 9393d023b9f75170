#!/usr/bin/env python3
"""Create the availability table for local development.

Point AWS_ENDPOINT_URL_DYNAMODB at DynamoDB Local (or LocalStack) to create
the table there instead of in the configured AWS account.

Usage:
    python scripts/create_tables.py --env dev
    python scripts/create_tables.py --env dev --region eu-west-1
"""

import argparse
import os
import sys

from botocore.exceptions import ClientError

from hostel_ledger.config import Settings
from hostel_ledger.services.dynamodb import AVAILABILITY_TABLE, DynamoDBService
from hostel_ledger.utils.logging import configure_logging


def main() -> int:
    """Run the table setup script."""
    parser = argparse.ArgumentParser(description="Create the availability ledger table")
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default=os.environ.get("ENVIRONMENT", "dev"),
        help="Target environment (default: dev or ENVIRONMENT env var)",
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_DEFAULT_REGION", "eu-west-1"),
        help="AWS region (default: eu-west-1 or AWS_DEFAULT_REGION env var)",
    )
    args = parser.parse_args()

    settings = Settings.from_env().model_copy(
        update={
            "environment": args.env,
            "table_prefix": os.environ.get("DYNAMODB_TABLE_PREFIX", f"hostel-{args.env}"),
            "region_name": args.region,
        }
    )
    configure_logging(settings.log_level)

    db = DynamoDBService(settings)
    name = db.table_name(AVAILABILITY_TABLE)
    try:
        db.create_availability_table()
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"Table {name} already exists")
            return 0
        print(f"Failed to create {name}: {e}")
        return 1
    finally:
        db.close()

    print(f"Created table {name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
