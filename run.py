import argparse

import uvicorn

from src.backend.config import settings


def main():
    parser = argparse.ArgumentParser(description="Run the employee directory API server.")
    parser.add_argument('--host', default=settings.HOST)
    parser.add_argument('--port', type=int, default=settings.PORT)
    parser.add_argument('--reload', action='store_true', help='restart on code changes (dev only)')
    args = parser.parse_args()

    print(f'Server running on port {args.port}')
    uvicorn.run(
        'src.backend.app:create_app',
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )

if __name__ == '__main__':
    main()
