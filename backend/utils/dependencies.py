from fastapi import Request

from crud.ledger import AccountResolver
from crud.settings import SettingsCache


def get_account_resolver(request: Request) -> AccountResolver:
    resolver = getattr(request.app.state, "account_resolver", None)
    if resolver is None:
        resolver = AccountResolver()
        request.app.state.account_resolver = resolver
    return resolver


def get_settings_cache(request: Request) -> SettingsCache:
    cache = getattr(request.app.state, "settings_cache", None)
    if cache is None:
        cache = SettingsCache()
        request.app.state.settings_cache = cache
    return cache
