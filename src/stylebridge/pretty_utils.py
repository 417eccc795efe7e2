"""
Internal utilities for pretty printing.
"""
import rich.console

# Consoles without an explicit file follow sys.stdout and sys.stderr even
# after they are replaced.
_rich_consoles = {
    'stdout': rich.console.Console(),
    'stderr': rich.console.Console(stderr=True),
}


def get_console(file: str = 'stdout') -> rich.console.Console:
    return _rich_consoles[file]


def print_with_style(*args, sep=' ', end='\n', file: str = 'stdout', style=None):
    """
    print() through a rich console, with optional style. Markup in the
    arguments is not interpreted, so diagnostics print verbatim.
    """
    _rich_consoles[file].print(*args, sep=sep, end=end, style=style,
                               markup=False, highlight=False, soft_wrap=True)
