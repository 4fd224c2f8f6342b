"""Provider discovery - the ordered list of providers to ask.

Order approximates how a host looks things up:
1. The system-wide default provider
2. The caller's provider chain, outermost ancestor first, caller's own provider last
3. The provider associated with the current context

The caller's provider is passed in explicitly rather than guessed from the call
stack. Providers are deduplicated by identity.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def provider_chain(provider: Any, parent_attribute: str = "parent") -> list[Any]:
    """
    Return a provider and its ancestors, outermost ancestor first.

    Ancestors are followed through `parent_attribute` until it is missing or None.
    A chain that loops back on itself stops at the first repeat.

    Example:
        >>> root = PathListProvider(["/srv/base"])
        >>> leaf = PathListProvider(["/srv/app"], parent=root)
        >>> provider_chain(leaf) == [root, leaf]
        True
    """
    chain: list[Any] = []
    seen: set[int] = set()
    current = provider
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        current = getattr(current, parent_attribute, None)
    chain.reverse()
    return chain


def discover_providers(
    system_provider: Any,
    caller_provider: Any = None,
    context_provider: Any = None,
) -> list[Any]:
    """
    Build the ordered, identity-deduplicated list of providers.

    Args:
        system_provider: Process-wide default provider
        caller_provider: The caller's own provider; its ancestors are included
        context_provider: Provider associated with the current thread/task

    Returns:
        Providers in the order they should be enumerated (None entries dropped)
    """
    providers: list[Any] = []
    seen: set[int] = set()

    def add(provider: Any) -> None:
        if provider is None or id(provider) in seen:
            return
        seen.add(id(provider))
        providers.append(provider)

    add(system_provider)
    if caller_provider is not None:
        for provider in provider_chain(caller_provider):
            add(provider)
    add(context_provider)

    logger.debug(f"Discovered {len(providers)} providers: {providers}")
    return providers
