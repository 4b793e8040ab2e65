from typing import Callable
from functools import wraps

from app.core.errors import StorageError
from app.utils.log_utils import log_debug

def safe_db_operation(operation_name: str = "Database operation"):
    """
    Decorator for executing Roster Store operations with uniform error handling.

    Any failure raised by the Supabase client is logged and re-raised as
    StorageError. Responses are unwrapped to their ``data`` payload.
    
    Usage:
        @safe_db_operation("Get school")
        def get_school(supabase_client, school_id: str):
            return supabase_client.table("schools").select("*").eq("id", school_id).execute()
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(supabase_client, *args, **kwargs):
            try:
                result = func(supabase_client, *args, **kwargs)
            except StorageError:
                raise
            except Exception as e:
                log_debug(f"Database operation failed: {operation_name}", {
                    "error": str(e),
                    "type": type(e).__name__,
                    "args": str(args),
                }, service="database")
                raise StorageError(f"{operation_name} failed") from e

            # Handle Supabase response
            if hasattr(result, 'data'):
                return result.data
            return result
            
        return wrapper
    return decorator
