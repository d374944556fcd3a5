"""Package entry point for ``python -m tts_pacer``.

WHY: Users run the pacer as ``python -m tts_pacer "hola mundo" --print``
for CLI mode, or ``python -m tts_pacer --serve`` for the HTTP service.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from tts_pacer.server.app import run_api
        run_api()
    else:
        from tts_pacer.cli import main
        main()
