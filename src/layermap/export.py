"""
Export functionality for parsed mappings.

Supports exporting to various formats:
- JSON: Machine-readable format for integration
- CSV: Table inventory and field mapping sheets for spreadsheets
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict

from .inference import infer_data_type
from .models import MappingResult


class JSONExporter:
    """
    Export a mapping result to JSON format.

    Used by the CLI and by applications storing parsed inventories.
    """

    @staticmethod
    def export(result: MappingResult, include_mappings: bool = True) -> Dict[str, Any]:
        """
        Export a mapping result to a JSON-serializable dictionary.

        Args:
            result: The parsed mapping result
            include_mappings: Whether to include field-level mappings per source

        Returns:
            Dictionary with tables, lineage and summary

        Example:
            data = JSONExporter.export(result)
            with open("inventory.json", "w") as f:
                json.dump(data, f)
        """
        data: Dict[str, Any] = {
            "input_format": result.input_format.value,
            "tables": [],
            "lineage": {name: list(sources) for name, sources in result.lineage.items()},
            "summary": result.summary.to_dict(),
        }

        for table in result.tables:
            sources = []
            for source in table.sources:
                source_dict: Dict[str, Any] = {"name": source.name}
                if include_mappings:
                    source_dict["mappings"] = [
                        {
                            "source_field": m.source_field,
                            "target_field": m.target_field,
                            "transformation": m.transformation,
                        }
                        for m in source.mappings
                    ]
                sources.append(source_dict)

            data["tables"].append(
                {
                    "id": table.id,
                    "target_name": table.target_name,
                    "layer": table.layer.value,
                    "columns": list(table.columns),
                    "primary_keys": list(table.primary_keys),
                    "sources": sources,
                }
            )

        return data

    @staticmethod
    def export_to_file(
        result: MappingResult,
        file_path: str,
        include_mappings: bool = True,
        indent: int = 2,
    ):
        """
        Export a mapping result to a JSON file.

        Args:
            result: The parsed mapping result
            file_path: Path to output JSON file
            include_mappings: Whether to include field-level mappings
            indent: JSON indentation (default: 2)
        """
        data = JSONExporter.export(result, include_mappings=include_mappings)

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(data, f, indent=indent)


class CSVExporter:
    """
    Export table inventory and field mappings to CSV (one-way export only).

    The mapping sheet uses the same column order the CSV parser reads, so it
    can be edited in a spreadsheet and parsed again, as long as
    transformations contain no commas.
    """

    @staticmethod
    def export_tables_to_file(result: MappingResult, file_path: str):
        """
        Export one row per table.

        Args:
            result: The parsed mapping result
            file_path: Path to output CSV file
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["id", "target_name", "layer", "column_count", "primary_keys", "sources"])

            for table in sorted(result.tables, key=lambda t: t.target_name):
                writer.writerow(
                    [
                        table.id,
                        table.target_name,
                        table.layer.short_name,
                        len(table.columns),
                        ";".join(table.primary_keys),
                        ";".join(table.source_names()),
                    ]
                )

    @staticmethod
    def export_mappings_to_file(result: MappingResult, file_path: str):
        """
        Export one row per field mapping.

        Args:
            result: The parsed mapping result
            file_path: Path to output CSV file
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "source_table",
                    "source_field",
                    "target_table",
                    "target_field",
                    "data_type",
                    "transformation",
                ]
            )

            for table in result.tables:
                for source in table.sources:
                    for mapping in source.mappings:
                        writer.writerow(
                            [
                                source.name,
                                mapping.source_field,
                                table.target_name,
                                mapping.target_field,
                                infer_data_type(mapping.target_field),
                                mapping.transformation or "",
                            ]
                        )


__all__ = [
    "JSONExporter",
    "CSVExporter",
]
