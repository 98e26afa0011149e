# Views package init
"""
StickyShare Backend — View State
=================================

What:  UI state for the page surface, kept out of module globals.

    - NoteComposer: draft authoring state machine
    - Gallery: the displayed note list
    - ShareResolver: share links and the single-note view
    - Notifier: toasts raised while handling a request
"""
