"""Contact-suggestion cache and ranking engine for address autocomplete."""
