# Pagecraft geometry engine
#
# Modules are imported directly (pagecraft.engine.units, ...): dsl.schema
# depends on engine.units, and engine.visual_crop depends on dsl.schema.
