"""Topic names shared by the state layer and the views.

Publishers and subscribers agree on a topic's name here and on its payload
shape in ``storefront.bus.events``.
"""

# ---------------------------------------------------------------------------
# Published by the state layer
# ---------------------------------------------------------------------------
CATALOG_CHANGED = "items:changed"
CATALOG_FAILED = "catalog:failed"
PREVIEW_CHANGED = "preview:changed"
BASKET_CHANGED = "basket:changed"
BASKET_VIEW = "basket:view"
SHIPPING_ERRORS_CHANGED = "order:errors"
CONTACTS_ERRORS_CHANGED = "contacts:errors"
SHIPPING_READY = "order:ready"
CONTACTS_READY = "contacts:ready"
FIELD_REJECTED = "form:rejected"
DRAFT_RESET = "order:reset"
ORDER_SUBMITTED = "order:success"
ORDER_FAILED = "order:failed"

# ---------------------------------------------------------------------------
# Published by the views (user intent)
# ---------------------------------------------------------------------------
CARD_SELECT = "card:select"
BASKET_ADD = "basket:add"
BASKET_REMOVE = "basket:remove"
BASKET_OPEN = "basket:open"
FIELD_EDITED = "form:input"
SUBMIT_SHIPPING = "order:submit"
SUBMIT_CONTACTS = "contacts:submit"
MODAL_CLOSE = "modal:close"

# Matches every topic
ALL = "*"
