"""Core constants shared by routes and the rate limiter."""

# Rate limiter operation names (part of the per tenant/user/operation bucket key)
OP_UPLOAD_INITIATE = "documents.upload.initiate"
OP_UPLOAD_FINALIZE = "documents.upload.finalize"
OP_UPLOAD_INTENT_LIST = "upload_intents.list"
OP_UPLOAD_INTENT_CLEANUP = "upload_intents.cleanup"
