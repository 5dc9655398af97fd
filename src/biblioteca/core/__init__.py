# ABOUTME: Core reconciliation logic: file enumeration, record building, catalog sync.
