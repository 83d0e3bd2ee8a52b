"""
Runnable sample programs. Each module exposes ``main(argv=None)`` returning a process
exit status, and is installed as a console script.
"""
