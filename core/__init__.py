"""Core (UI-agnostic) cloud spend logic.

This package contains:
- dataset loading (JSON -> SpendRecord)
- query parsing and the filter stage
- sorting, aggregation and pagination
- response assembly (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
