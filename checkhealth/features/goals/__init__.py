"""
Goals: gamified health/wellness targets.

- policy: default progress (total, unit) by goal type and date range
- store: persistence port with in-memory and SQL implementations
- events: goal.created notification over a pub/sub transport
- mapper: wire <-> domain translation and the progress message
- service: lifecycle (create, read, update, delete, progress)
"""
