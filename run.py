#!/usr/bin/env python3
"""
Loan Repayment Projector Entry Point

Starts the FastAPI server with the loan projection API.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from loan_projector.api import run_server
from loan_projector.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Loan Repayment Projector...")
    print("All balance calculations use Decimal precision")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(debug=False)
    except KeyboardInterrupt:
        print("\nShutting down Loan Repayment Projector...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
