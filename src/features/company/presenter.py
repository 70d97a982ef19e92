from typing import Any, Dict, Optional


def company_result_text(query: str, company: Optional[Dict[str, Any]]) -> str:
    if not company:
        return f'No company found matching "{query}".'
    return f'Found company "{company.get("name")}" with ID: {company.get("company_id")}'
