"""
Events and their registration lists.

A quiz linked to an event is only open to emails registered for it.
"""
