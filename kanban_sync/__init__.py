# Kanban state sync: board model, drag reordering, debounced autosave, persistence
#
# Components:
#   schema.py   - Data model (Document, Board, Column, Task, Comment)
#   errors.py   - Error kinds shared by stores, session and server
#   store.py    - File-backed Document Store (seed once, atomic overwrite)
#   client.py   - HTTP Document Store talking to kanban_server.py
#   cache.py    - Local State Cache mirror (offline fallback)
#   model.py    - Board Model mutations and derived reads
#   reorder.py  - Drag-and-drop Reorder Engine
#   autosave.py - Debounced Autosave Scheduler
#   session.py  - Editor session wiring model, autosave, store and cache
#   config.py   - YAML-backed runtime configuration
