from typing import Any
from datetime import datetime, timezone
import json
import os

from app import config

def log_debug(message: str, data: Any = None, service: str = "general", verbose: bool = True):
    """
    Common logging function for all services.
    
    Args:
        message: The message to log
        data: Optional data to log (dict, list, or string)
        service: Service name for log file and context (e.g., "imports", "auth")
        verbose: Whether to log detailed data
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    log_entry = f"\n[{timestamp}] {message}\n"
    
    if data is not None:
        if verbose:
            if isinstance(data, (dict, list)):
                log_entry += json.dumps(data, indent=2, default=str)
            else:
                log_entry += str(data)
        else:
            # For non-verbose, just log summary
            if isinstance(data, dict):
                log_entry += f"Keys: {list(data.keys())}\n"
            elif isinstance(data, list):
                log_entry += f"List length: {len(data)}\n"
            else:
                log_entry += str(data)
        log_entry += "\n"
    
    os.makedirs(config.LOG_DIR, exist_ok=True)
    
    # Write to service-specific log file
    log_file = os.path.join(config.LOG_DIR, f"{service}_debug.log")
    with open(log_file, "a") as f:
        f.write(log_entry)
    
    print(log_entry, flush=True)
