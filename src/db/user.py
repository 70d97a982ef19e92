"""
DynamoDB Table: users

Partition key: user_id (string)

Attributes:
    - user_id (string, PK)
    - email (string)
    - name (string, optional)
    - api_token_hash (string)  # sha256 hex of the bearer token, never the token itself
    - status (string)          # 'active', 'disabled'
    - created_at (string, ISO8601)

GSIs:
    - GSI1_ApiToken:
        PK = api_token_hash
"""

import hashlib
import boto3
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from boto3.dynamodb.conditions import Key


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class UserDB:
    def __init__(self, table_name="users", region_name="eu-west-2"):
        self.table = boto3.resource("dynamodb", region_name=region_name).Table(table_name)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        resp = self.table.get_item(Key={"user_id": user_id})
        return resp.get("Item")

    def put_user(
        self,
        user_id: str,
        email: str,
        api_token: str,
        name: Optional[str] = None,
        status: str = "active",
    ) -> Dict[str, Any]:
        item = {
            "user_id": user_id,
            "email": email,
            "api_token_hash": hash_token(api_token),
            "status": status,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        if name:
            item["name"] = name
        self.table.put_item(Item=item)
        return item

    def lookup_user_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        resp = self.table.query(
            IndexName="GSI1_ApiToken",
            KeyConditionExpression=Key("api_token_hash").eq(hash_token(token)),
            Limit=1,
        )
        items = resp.get("Items", [])
        return items[0] if items else None
