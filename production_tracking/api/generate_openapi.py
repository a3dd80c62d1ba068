import json
import os

from production_tracking.api.main import app

# Get the OpenAPI schema (note: all REST routes are under /api/v1)
openapi_schema = app.openapi()

# Document the stateless contract next to the generated paths
openapi_schema["x-collection-contract"] = {
    "request": "Every POST body carries a 'snapshot' with jobs, development_samples, parcels, "
    "issued_work_orders, buyers and company.",
    "response": "Commands return an 'update' whose non-null collections replace the caller's "
    "collections; apply them together before the next call.",
}

# Write to file
output_dir = "interfaces"
os.makedirs(output_dir, exist_ok=True)
output_path = os.path.join(output_dir, "openapi.json")

with open(output_path, "w") as f:
    json.dump(openapi_schema, f, indent=2)
