"""
Naming and type inference helpers for mapping sheets.

This module contains:
- Data type inference from type hints and field names
- Transformation hints from source/target field name differences
- Name cleaning for physical table/column identifiers
- A sample CSV mapping template

None of these run during a parse; renderers and the CLI use them.
"""

import re
from typing import Dict, Optional, Pattern

# Type hint patterns, checked in order
DATA_TYPE_PATTERNS: Dict[str, Pattern[str]] = {
    "STRING": re.compile(r"^(string|varchar|text|char|name|description|code)", re.IGNORECASE),
    "NUMERIC": re.compile(r"^(int|integer|number|numeric|decimal|float|double|bigint)", re.IGNORECASE),
    "TIMESTAMP": re.compile(r"^(timestamp|datetime|date|time)", re.IGNORECASE),
    "BOOLEAN": re.compile(r"^(bool|boolean|flag|is_|has_)", re.IGNORECASE),
}

# Source placeholder in transformation templates
SOURCE_PLACEHOLDER = "${source}"


def infer_data_type(field_name: str, type_hint: Optional[str] = None) -> str:
    """
    Infer a warehouse data type from an explicit hint, falling back to the field name.

    Example:
        infer_data_type("amount", "decimal(10,2)")  # "NUMERIC"
        infer_data_type("created_at")  # "TIMESTAMP"
    """
    if type_hint:
        for data_type, pattern in DATA_TYPE_PATTERNS.items():
            if pattern.search(type_hint):
                return data_type

    lower = field_name.lower()
    if re.search(r"_at$|_date$|_time$|timestamp", lower):
        return "TIMESTAMP"
    if re.search(r"_id$|^id$|_key$", lower):
        return "STRING"
    if re.search(r"amount|price|cost|total|sum|count|quantity", lower):
        return "NUMERIC"
    if re.search(r"^is_|^has_|_flag$", lower):
        return "BOOLEAN"
    return "STRING"


def is_required_field(field_name: str) -> bool:
    """Keys and audit timestamps are mandatory"""
    lower = field_name.lower()
    return lower in ("id", "created_at", "updated_at") or lower.endswith("_id")


def detect_transformation(source_field: str, target_field: str) -> Optional[str]:
    """
    Suggest a transformation template from field name differences.

    Templates use ${source} for the source column. Identical names need none.
    """
    if source_field == target_field:
        return None

    source_lower = source_field.lower()
    target_lower = target_field.lower()

    if "date" in source_lower and "timestamp" in target_lower:
        return "CAST(${source} AS TIMESTAMP)"
    if "string" in source_lower and "int" in target_lower:
        return "CAST(${source} AS INT64)"
    if "upper" in target_lower:
        return "UPPER(${source})"
    if "lower" in target_lower:
        return "LOWER(${source})"
    if "trim" in target_lower:
        return "TRIM(${source})"
    return f"{source_field} AS {target_field}"


def apply_transformation(transformation: str, source_field: str) -> str:
    """Substitute the source column into a transformation template"""
    return transformation.replace(SOURCE_PLACEHOLDER, source_field)


def clean_name(name: str) -> str:
    """
    Normalize a name to a lowercase snake_case identifier.

    Example:
        clean_name("  Customer Name (EN) ")  # "customer_name_en"
    """
    cleaned = re.sub(r"[^a-z0-9_]", "_", name.strip().lower())
    cleaned = re.sub(r"_+", "_", cleaned)
    return cleaned.strip("_")


def sample_template() -> str:
    """Sample CSV mapping sheet covering all three layers"""
    return """# Mapping Template
# Format: source_table,source_field,target_table,target_field,data_type

# Example ODP Layer
raw_customers,customer_id,odp_customer,id,STRING
raw_customers,customer_name,odp_customer,name,STRING
raw_customers,created_date,odp_customer,created_at,TIMESTAMP
raw_customers,modified_date,odp_customer,updated_at,TIMESTAMP

# Example FDP Layer
odp_customer,id,fdp_customer_master,customer_id,STRING
odp_customer,name,fdp_customer_master,customer_name,STRING
odp_customer,created_at,fdp_customer_master,created_at,TIMESTAMP
odp_customer,updated_at,fdp_customer_master,updated_at,TIMESTAMP

# Example CDP Layer
fdp_customer_master,customer_id,cdp_customer_analytics,customer_key,STRING
fdp_customer_master,customer_name,cdp_customer_analytics,customer_full_name,STRING
fdp_order_summary,total_orders,cdp_customer_analytics,order_count,NUMERIC
fdp_order_summary,total_amount,cdp_customer_analytics,lifetime_value,NUMERIC
"""


__all__ = [
    "DATA_TYPE_PATTERNS",
    "SOURCE_PLACEHOLDER",
    "infer_data_type",
    "is_required_field",
    "detect_transformation",
    "apply_transformation",
    "clean_name",
    "sample_template",
]
