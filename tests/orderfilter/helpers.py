"""Constants shared by the orderfilter tests."""

GANACHE_CHAIN_ID = 1337
GANACHE_EXCHANGE = "0x48bacb9266a570d521063ef5dd96e61686dbe788"
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

MAKER = "0x6ecbe1db9ef729cbe972c83fb886247691fb6beb"
FEE_RECIPIENT = "0xa258b39954cef5cb142fd567a46cddb31a670124"
MAKER_TOKEN = "0b1ba0af832d7c05fd64161e0db78e85978e8082"
TAKER_TOKEN = "871dd7c2b4b25e1aa18728e9d5f2af4c4e431f5c"

SIGNATURE = "0x1b" + "ab" * 64 + "02"


def erc20_asset_data(token: str) -> str:
    return "0xf47261b0" + "0" * 24 + token
