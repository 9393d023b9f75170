"""FastAPI boundary for the hostel inventory ledger.

Exposes availability reads, inventory management and reservations over
HTTP. Run locally with ``hostel-api`` (uvicorn) or deploy ``handler`` to
AWS Lambda behind API Gateway.
"""
