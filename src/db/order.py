"""
DynamoDB Table: orders (multi-tenant SaaS)

Primary Key (composite):
    - PK = TENANT#{account_id}
    - SK = ORDER#{order_id}                 (header)
    - SK = ORDER#{order_id}#ITEM#{nnn}      (line item, nnn = 001..099)
    - SK = COUNTER#ORDER                    (per-tenant order number sequence)

Header attributes:
    - order_id, order_number, account_id, company_id
    - status, item_count
    - created_at

Line item attributes:
    - order_id, product_id, quantity

GSIs:
    - GSI1_CompanyOrders:
        PK = TENANT#{account_id}#COMPANY#{company_id}
        SK = CREATED_AT#{created_at}#ORDER#{order_id}

Header and items are written in one TransactWriteItems call, so an order is
either stored with all of its items or not at all.
"""

import boto3
import uuid
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from boto3.dynamodb.conditions import Key

# TransactWriteItems accepts 100 actions; one of them is the header.
MAX_ITEMS_PER_ORDER = 99


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrderDB:
    def __init__(self, table_name="orders", region_name="eu-west-2"):
        self.resource = boto3.resource("dynamodb", region_name=region_name)
        self.table = self.resource.Table(table_name)
        self.table_name = table_name

    @staticmethod
    def pk_tenant(account_id: str) -> str:
        return f"TENANT#{account_id}"

    @staticmethod
    def sk_order(order_id: str) -> str:
        return f"ORDER#{order_id}"

    @staticmethod
    def sk_item(order_id: str, index: int) -> str:
        return f"ORDER#{order_id}#ITEM#{index:03d}"

    # -------------------- Create --------------------

    def next_order_number(self, account_id: str) -> int:
        """Atomically increment the tenant's order counter and return the new value."""
        resp = self.table.update_item(
            Key={"PK": self.pk_tenant(account_id), "SK": "COUNTER#ORDER"},
            UpdateExpression="ADD seq :one",
            ExpressionAttributeValues={":one": 1},
            ReturnValues="UPDATED_NEW",
        )
        return int(resp["Attributes"]["seq"])

    def create_order_with_items(
        self,
        account_id: str,
        company_id: str,
        items: List[Dict[str, Any]],
        status: str,
        order_number: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Write an order header and its line items in a single transaction.

        Args:
            account_id: Tenant the order belongs to
            company_id: Customer company the order is for
            items: [{"product_id": str, "quantity": int}, ...], 1..99 entries
            status: Initial order status
            order_number: Display number; drawn from the tenant counter when None

        Returns:
            The stored header item

        Raises:
            ValueError: items is empty or too long
            botocore.exceptions.ClientError: the store rejected the transaction
        """
        if not items:
            raise ValueError("An order needs at least one item")
        if len(items) > MAX_ITEMS_PER_ORDER:
            raise ValueError(f"An order can have at most {MAX_ITEMS_PER_ORDER} items")

        if order_number is None:
            order_number = self.next_order_number(account_id)

        order_id = str(uuid.uuid4())
        timestamp = now_iso()

        header = {
            "PK": self.pk_tenant(account_id),
            "SK": self.sk_order(order_id),

            "entity": "ORDER",
            "order_id": order_id,
            "order_number": order_number,
            "account_id": account_id,
            "company_id": company_id,
            "status": status,
            "item_count": len(items),
            "created_at": timestamp,

            # GSI1: Company orders
            "GSI1PK": f"TENANT#{account_id}#COMPANY#{company_id}",
            "GSI1SK": f"CREATED_AT#{timestamp}#ORDER#{order_id}",
        }

        transact_items = [
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": header,
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            }
        ]
        for index, line in enumerate(items, start=1):
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table_name,
                        "Item": {
                            "PK": self.pk_tenant(account_id),
                            "SK": self.sk_item(order_id, index),
                            "entity": "ORDER_ITEM",
                            "order_id": order_id,
                            "product_id": line["product_id"],
                            "quantity": int(line["quantity"]),
                            "created_at": timestamp,
                        },
                    }
                }
            )

        self.resource.meta.client.transact_write_items(TransactItems=transact_items)
        return header

    # -------------------- Items --------------------

    def list_order_items(self, account_id: str, order_id: str) -> List[Dict[str, Any]]:
        resp = self.table.query(
            KeyConditionExpression=Key("PK").eq(self.pk_tenant(account_id))
            & Key("SK").begins_with(f"ORDER#{order_id}#ITEM#"),
        )
        return resp.get("Items", [])

    # -------------------- Queries --------------------

    def list_company_orders(
        self,
        account_id: str,
        company_id: str,
        created_from: Optional[str] = None,
        created_to: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Orders for one company, oldest first. `created_from` / `created_to` are ISO
        dates or timestamp prefixes, both inclusive; "~" sorts after any timestamp
        character so a bare date as the upper bound covers the whole day.
        """
        key_cond = Key("GSI1PK").eq(f"TENANT#{account_id}#COMPANY#{company_id}")
        if created_from and created_to:
            key_cond = key_cond & Key("GSI1SK").between(
                f"CREATED_AT#{created_from}", f"CREATED_AT#{created_to}~"
            )
        elif created_from:
            key_cond = key_cond & Key("GSI1SK").gte(f"CREATED_AT#{created_from}")
        elif created_to:
            key_cond = key_cond & Key("GSI1SK").lte(f"CREATED_AT#{created_to}~")

        kwargs: Dict[str, Any] = {
            "IndexName": "GSI1_CompanyOrders",
            "KeyConditionExpression": key_cond,
            "ScanIndexForward": True,
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
