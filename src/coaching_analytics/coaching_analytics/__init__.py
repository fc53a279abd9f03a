"""Coaching analytics package.

Batch-scoped attendance and marks for multi-tenant coaching institutes,
organized by feature modules (batches, attendance, marks, stats, ...) with a
thin Flask controller layer over service/repository layers.
"""
