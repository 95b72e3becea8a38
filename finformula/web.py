"""
FastAPI interface for evaluating formulas over HTTP.

A spreadsheet can pull a formula result into a cell with IMPORTDATA on
GET /formula/{name}?args=...&args=..., which answers with the rendered
value as plain text.
"""

import re
from typing import List
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, field_validator
from finformula.data_sources.client import DataClient, default_client
from finformula.errors import ConfigError
from finformula.formulas import FORMULAS, evaluate

MAX_ARGS = 8
MAX_ARG_LENGTH = 64

app = FastAPI(title="Financial Data Formulas")


def get_client() -> DataClient:
    """Shared DataClient, built from settings on first use."""
    try:
        return default_client()
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=f"Invalid configuration: {e}")


# Input validation models
class FormulaRequest(BaseModel):
    name: str
    args: List[str] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v not in FORMULAS:
            raise ValueError(f"Unknown formula: {v}")
        return v

    @field_validator("args")
    @classmethod
    def validate_args(cls, v):
        if len(v) > MAX_ARGS:
            raise ValueError(f"Too many arguments (max {MAX_ARGS})")
        validated = []
        for arg in v:
            arg = arg.strip()
            if len(arg) > MAX_ARG_LENGTH:
                raise ValueError(f"Argument too long (max {MAX_ARG_LENGTH} chars)")
            # Tickers (BRK.A, ^TNX), dates, numbers and indicator codes
            if not re.match(r'^[A-Za-z0-9.\-_/^: ]*$', arg):
                raise ValueError(f"Invalid argument: {arg}")
            validated.append(arg)
        return validated


@app.get("/api/formulas")
async def list_formulas():
    """List the available formula names."""
    return {"formulas": list(FORMULAS)}


@app.get("/formula/{name}", response_class=PlainTextResponse)
def run_formula(
    name: str,
    args: List[str] = Query(default=[]),
    client: DataClient = Depends(get_client)
):
    """Evaluate a formula and return the cell value as plain text."""
    if name not in FORMULAS:
        raise HTTPException(status_code=404, detail="Formula not found")

    try:
        request = FormulaRequest(name=name, args=args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = evaluate(request.name, *request.args, client=client)
    return PlainTextResponse(str(result.render()))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
