"""Ingest helpers: download DataUSA payloads and parse them into raw rows."""
