"""
DynamoDB Table: customer_companies (multi-tenant SaaS)

Primary Key (composite):
    - PK = TENANT#{account_id}
    - SK = COMPANY#{company_id}

Attributes:
    - company_id, account_id
    - name, name_lower (lowercased, whitespace-collapsed name, used for contains filters)
    - domain (optional)
    - created_at

Default ordering inside a tenant is the sort key order.
"""

import boto3
import uuid
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
from boto3.dynamodb.conditions import Key, Attr

from utils.matching import normalize_name


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CompanyDB:
    def __init__(self, table_name="customer_companies", region_name="eu-west-2"):
        self.table = boto3.resource("dynamodb", region_name=region_name).Table(table_name)

    @staticmethod
    def pk_tenant(account_id: str) -> str:
        return f"TENANT#{account_id}"

    @staticmethod
    def sk_company(company_id: str) -> str:
        return f"COMPANY#{company_id}"

    # -------------------- Create --------------------

    def put_company(
        self,
        account_id: str,
        name: str,
        company_id: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> Dict[str, Any]:
        company_id = company_id or str(uuid.uuid4())
        item = {
            "PK": self.pk_tenant(account_id),
            "SK": self.sk_company(company_id),
            "entity": "COMPANY",
            "company_id": company_id,
            "account_id": account_id,
            "name": name,
            "name_lower": normalize_name(name),
            "created_at": now_iso(),
        }
        if domain:
            item["domain"] = domain
        self.table.put_item(Item=item)
        return item

    # -------------------- Get --------------------

    def get_company(self, account_id: str, company_id: str) -> Optional[Dict[str, Any]]:
        resp = self.table.get_item(
            Key={"PK": self.pk_tenant(account_id), "SK": self.sk_company(company_id)}
        )
        return resp.get("Item")

    # -------------------- Queries --------------------

    def list_companies(
        self, account_id: str, name_contains: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """All companies of a tenant in sort key order, optionally filtered by name."""
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": Key("PK").eq(self.pk_tenant(account_id))
            & Key("SK").begins_with("COMPANY#"),
        }
        # Normalized the same way as name_lower and the ranker
        needle = normalize_name(name_contains)
        if needle:
            kwargs["FilterExpression"] = Attr("name_lower").contains(needle)

        items: List[Dict[str, Any]] = []
        while True:
            resp = self.table.query(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return items
