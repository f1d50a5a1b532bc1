# laneboard: drag reconciliation for lane/item scheduling boards
#
# Components:
#   schema.py     - Data model (Lane, Item, ActiveDrag, PseudoLane, DropTarget)
#   grid.py       - Grid snapping and vertical overlap checks
#   collision.py  - Drop target detection with sticky fallback
#   store.py      - Lane sequence + item collection, immutable snapshots
#   reconciler.py - Drag lifecycle state machine, commits to the store
#   events.py     - Gesture-layer event bridge and subscriptions
#   scheduler.py  - Wires the above together for one board
#   config.py     - YAML board configuration
#   server.py     - Flask JSON API for browser drag layers
