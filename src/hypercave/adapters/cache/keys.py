"""Cache key layout shared by resolvers and reconciliation."""

VAULT_TOKENS_KEY = "cave_tokens"


def resource_key(address: str) -> str:
    return f"resource:{address}"


def fungibles_key(account: str) -> str:
    return f"fungibles:{account}"


def nfts_key(account: str) -> str:
    return f"nfts:{account}"
