"""
DynamoDB Table: assistant_updates

Append-only progress log written while an assistant run is in flight.

Primary Key (composite):
    - PK = USER#{user_id}
    - SK = CREATED_AT#{created_at}#{update_id}

Attributes:
    - update_id, user_id, run_id
    - content (short human-readable status line)
    - created_at (ISO8601, microsecond precision)

GSIs:
    - GSI1_RunUpdates:
        PK = RUN#{run_id}
        SK = created_at
"""

import boto3
import uuid
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from boto3.dynamodb.conditions import Key


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class AssistantUpdateDB:
    def __init__(self, table_name="assistant_updates", region_name="eu-west-2"):
        self.table = boto3.resource("dynamodb", region_name=region_name).Table(table_name)

    def put_update(
        self, user_id: str, run_id: str, content: str, created_at: Optional[str] = None
    ) -> Dict[str, Any]:
        """Append one entry. `created_at` is the moment the status was reported."""
        update_id = str(uuid.uuid4())
        timestamp = created_at or now_iso()
        item = {
            "PK": f"USER#{user_id}",
            "SK": f"CREATED_AT#{timestamp}#{update_id}",
            "entity": "ASSISTANT_UPDATE",
            "update_id": update_id,
            "user_id": user_id,
            "run_id": run_id,
            "content": content,
            "created_at": timestamp,
            "GSI1PK": f"RUN#{run_id}",
            "GSI1SK": timestamp,
        }
        # Entries are never overwritten
        self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        return item

    def latest_update(self, user_id: str, since: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Most recent entry for the user, created strictly after `since` when given."""
        key_cond = Key("PK").eq(f"USER#{user_id}")
        if since:
            # "~" sorts after every character of a timestamp, so equal timestamps are excluded
            key_cond = key_cond & Key("SK").gt(f"CREATED_AT#{since}~")
        else:
            key_cond = key_cond & Key("SK").begins_with("CREATED_AT#")
        resp = self.table.query(
            KeyConditionExpression=key_cond,
            ScanIndexForward=False,  # latest first
            Limit=1,
        )
        items = resp.get("Items", [])
        return items[0] if items else None

    def list_run_updates(self, run_id: str) -> List[Dict[str, Any]]:
        """All entries of one run, oldest first."""
        kwargs: Dict[str, Any] = {
            "IndexName": "GSI1_RunUpdates",
            "KeyConditionExpression": Key("GSI1PK").eq(f"RUN#{run_id}"),
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
