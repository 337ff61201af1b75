from .identification import identification_router

__all__ = ["identification_router"]
