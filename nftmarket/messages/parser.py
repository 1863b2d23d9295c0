import msgspec
import structlog

from nftmarket.core.errors import InvalidTransactionError
from nftmarket.core.logging import Logger
from nftmarket.messages.protocol import Funding, Transaction

logger: Logger = structlog.getLogger(__name__)

# Pre-compiled decoders and encoder
_tx_decoder = msgspec.json.Decoder(Transaction)
_funding_decoder = msgspec.json.Decoder(Funding)
_encoder = msgspec.json.Encoder()


class TransactionParser:
    def parse_transaction(self, data: bytes) -> Transaction:
        """
        Decode one JSON transaction into its typed struct.

        The "type" field selects the transaction kind.
        """
        try:
            return _tx_decoder.decode(data)
        except (msgspec.ValidationError, msgspec.DecodeError) as e:
            logger.debug(f"Rejected transaction payload: {e}")
            raise InvalidTransactionError(str(e)) from e

    def parse_funding(self, data: bytes) -> Funding:
        try:
            return _funding_decoder.decode(data)
        except (msgspec.ValidationError, msgspec.DecodeError) as e:
            raise InvalidTransactionError(str(e)) from e

    @staticmethod
    def encode(obj: object) -> bytes:
        return _encoder.encode(obj)
