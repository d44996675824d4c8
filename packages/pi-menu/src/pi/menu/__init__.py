"""pi-menu: dynamic menu that filters stdin lines as you type."""

# Candidates
from pi.menu.candidates import (
    Candidate,
    CandidateLoadError,
    CandidateStore,
    load_candidates,
)

# Configuration
from pi.menu.config import MenuColors, MenuConfig, load_config

# Keybindings
from pi.menu.keybindings import (
    DEFAULT_MENU_KEYBINDINGS,
    BindingAction,
    MenuKeybindingsManager,
)

# Keyboard and mouse input
from pi.menu.keys import KeyId, MouseEvent, parse_key, parse_mouse

# Layout
from pi.menu.layout import Box, MenuLayout, RenderSink, build_layout

# Matching
from pi.menu.matcher import CaseMode, MatchEngine, MatchList, tokenize

# Session and navigation
from pi.menu.navigation import (
    Command,
    MenuAction,
    NavigationStateMachine,
    Session,
    SessionStatus,
)

# Paging
from pi.menu.page_window import LayoutMode, PageWindow

# Terminal interface
from pi.menu.terminal import Terminal, TtyTerminal

# Query text
from pi.menu.text_buffer import DEFAULT_CAPACITY, TextBuffer

# Widths
from pi.menu.width import CellMeasurer, truncate_to_width, visible_width

# Application
from pi.menu.app import MenuApp, run_menu

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Candidates
    "Candidate",
    "CandidateLoadError",
    "CandidateStore",
    "load_candidates",
    # Configuration
    "MenuColors",
    "MenuConfig",
    "load_config",
    # Keybindings
    "DEFAULT_MENU_KEYBINDINGS",
    "BindingAction",
    "MenuKeybindingsManager",
    # Keys
    "KeyId",
    "MouseEvent",
    "parse_key",
    "parse_mouse",
    # Layout
    "Box",
    "MenuLayout",
    "RenderSink",
    "build_layout",
    # Matching
    "CaseMode",
    "MatchEngine",
    "MatchList",
    "tokenize",
    # Navigation
    "Command",
    "MenuAction",
    "NavigationStateMachine",
    "Session",
    "SessionStatus",
    # Paging
    "LayoutMode",
    "PageWindow",
    # Terminal
    "Terminal",
    "TtyTerminal",
    # Text buffer
    "DEFAULT_CAPACITY",
    "TextBuffer",
    # Widths
    "CellMeasurer",
    "truncate_to_width",
    "visible_width",
    # Application
    "MenuApp",
    "run_menu",
]
