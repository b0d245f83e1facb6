import click
from eth_utils import to_checksum_address

# largest non-hardened BIP-32 child index
MAX_ACCOUNT_INDEX = 2**31 - 1


class AccountIndex(click.ParamType):
    name = "account_index"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            index = value
        else:
            try:
                index = int(value)
            except ValueError:
                self.fail(f"{value} is not a valid integer", param, ctx)
        if not 0 <= index <= MAX_ACCOUNT_INDEX:
            self.fail(f"{value} is not in the range 0..{MAX_ACCOUNT_INDEX}", param, ctx)
        return index


class ChecksumAddress(click.ParamType):
    """An address option; an empty value (e.g. an exported but blank env var) means unset."""

    name = "checksum_address"

    def convert(self, value, param, ctx):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        try:
            value = to_checksum_address(value.strip())
        except ValueError:
            self.fail(f"{value} is not a valid ethereum address", param, ctx)
        else:
            return value
