# Hook fixtures loaded by docscript.hooks.HookScript.
# `contains` and `iso_timestamp` are provided by the runtime namespace.


def set_doc_timestamp(doc):
    doc.set("timestamp", iso_timestamp())


def is_super_user(meta):
    return contains(meta.get("roles"), "super_user")


def account_query_auth(query, meta):
    return bool(query.where) and query.where[0].field == "_id" and query.where[0].op == "eq" and contains(meta.get("groups"), query.where[0].value)
