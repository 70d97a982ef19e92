"""
DynamoDB Table: products (multi-tenant SaaS)

Primary Key (composite):
    - PK = TENANT#{account_id}
    - SK = PRODUCT#{product_id}

Attributes:
    - product_id, account_id
    - name, name_lower
    - price (number/decimal)
    - created_at
"""

import boto3
import uuid
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from boto3.dynamodb.conditions import Key


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProductDB:
    def __init__(self, table_name="products", region_name="eu-west-2"):
        self.table = boto3.resource("dynamodb", region_name=region_name).Table(table_name)

    def put_product(
        self,
        account_id: str,
        name: str,
        price: float,
        product_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        product_id = product_id or str(uuid.uuid4())
        item = {
            "PK": f"TENANT#{account_id}",
            "SK": f"PRODUCT#{product_id}",
            "entity": "PRODUCT",
            "product_id": product_id,
            "account_id": account_id,
            "name": name,
            "name_lower": name.lower(),
            "price": Decimal(str(price)),
            "created_at": now_iso(),
        }
        self.table.put_item(Item=item)
        return item

    def get_product(self, account_id: str, product_id: str) -> Optional[Dict[str, Any]]:
        resp = self.table.get_item(
            Key={"PK": f"TENANT#{account_id}", "SK": f"PRODUCT#{product_id}"}
        )
        return resp.get("Item")

    def list_products(self, account_id: str) -> List[Dict[str, Any]]:
        """The tenant's whole catalog in sort key order."""
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": Key("PK").eq(f"TENANT#{account_id}")
            & Key("SK").begins_with("PRODUCT#"),
        }
        items: List[Dict[str, Any]] = []
        while True:
            resp = self.table.query(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return items
