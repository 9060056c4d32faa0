# owlkit

Shared building blocks for services that move tokens between chains.

## What is inside

- `owlkit.common` – conversion between human-readable amounts and integer
  base units (`from_ui_string`, `from_ui_float`, `string_to_ui`,
  `big_int_to_ui`), `get_json_big_int`, zero-address detection
  (`is_hex_string_zero`), `is_hex_address`, `is_evm_address` and
  `mask_evm_address`.
- `owlkit.address` – EIP-55 checksums for 20-byte addresses and Starknet-style
  checksums for 32-byte addresses (`get_checksum_address`,
  `get_checksum_address40`, `get_checksum_address64`), plus `keccak256` and
  `starknet_keccak`.
- `owlkit.context` – per-context environment name and log id
  (`set_env`, `get_env`, `is_test_env`, `is_prod_env`, `generate_log_id`,
  `get_log_id`, and the `with_log_id` context manager).
- `owlkit.paging` – `norm_page` and `norm_page_size`.
- `owlkit.system` – `make_dir_all` and `wait_for_quit_signals`, which blocks
  until SIGINT or SIGTERM and returns a `QuitCode` of 128 plus the signal
  number.
- `owlkit.chains` – chain name constants such as `ETHEREUM` and `SOLANA`.
- `owlkit.http` – `request(url, data=None)`: GET, or POST of `data` as JSON,
  returning the decoded JSON reply and raising `RequestError` on failure.
- `owlkit.btc` – JSON bodies for plain Bitcoin payments (`transfer_body`) and
  BRC-20 transfers (`brc20_transfer_body`).
- `owlkit.evm` – `to_body` for EVM transaction bodies, `estimate_gas` through
  `eth_estimateGas` (with a 50 % margin) and `transfer_body` for native
  transfers.
- `owlkit.logger` – `setup(log_dir=None)` sends the package logger to stdout
  in colour and to a rotating `app.log` (by default in
  `~/logs/<program name>`), with lines in Shanghai time; `get_logger`,
  `debug`, `info`, `warn`, `error`; `LogFormatter`.
- `owlkit.zkslite` – `ZksliteRpc.get_balance` reads committed ETH, USDC and
  USDT balances from a zkSync Lite JSON-RPC endpoint.
- `owlkit.loader` – in-memory caches of configuration tables and access to
  transaction tables:
  - `chain_info` (`ChainInfoManager`, `ChainInfo`, `Backend`)
  - `tokens` (`TokenInfoManager`, `TokenInfo`)
  - `accounts` (`AccountManager`)
  - `exchanges` (`ExchangeInfoManager`)
  - `prices` (`UpdatePriceManager`)
  - `popular` (`PopularListManager`)
  - `bridge_fee` (`BridgeFeeManager`)
  - `dtc` (`DtcManager`)
  - `lp_info` (`LpInfoManager`)
  - `commission` (`ChannelCommissionRatioManager`)
  - `cctp` (`CircleCctpChainManager`)
  - `maker_address` (`MakerAddressManager`)
  - `dst_tx` (`DstTxManager`) and `src_tx` (`SrcTxManager`)

## Examples

Amounts are handled as exact integers in base units:

```python
from owlkit.common import from_ui_string, big_int_to_ui, mask_evm_address

from_ui_string("1.5", 6)           # 1500000
big_int_to_ui(1500000, 6)          # Decimal('1.500000')
mask_evm_address("0x1234567890abcdef1234567890abcdef12345678")
# '0x1234****5678'
```

Address checksums:

```python
from owlkit.address import get_checksum_address

get_checksum_address("0x" + "ab" * 20)          # mixed-case EIP-55 form
get_checksum_address("0x" + "0" * 63 + "1")     # 32-byte form
```

Paging parameters coming from a request:

```python
from owlkit.paging import norm_page, norm_page_size

norm_page(0)          # 1
norm_page_size(500)   # 100
```

A Bitcoin transfer body:

```python
from owlkit.btc import transfer_body

body = transfer_body("bc1qexamplereceiver", 10_000)
```

A log id for the duration of a request:

```python
from owlkit.context import generate_log_id, with_log_id
from owlkit import logger

logger.setup()
with with_log_id(generate_log_id()):
    logger.info("handling request")
```

## Loaders

Each manager takes a DB-API connection and, optionally, an alerter: any
object with an `alert_text(text, err)` method. Without an alerter, problems
are logged. Call the manager's `load_all_*` method on start-up and whenever
the data should be refreshed, then query it with its `get_*` methods; a
failed query keeps the previously loaded data, and rows that cannot be read
are skipped. `DstTxManager` and `SrcTxManager` write directly and accept
`paramstyle="qmark"` (`?` placeholders) or `paramstyle="format"` (`%s`).

`ChainInfoManager` takes an optional `client_factory`, called with each loaded
`ChainInfo`; its result is stored as the chain's `client`.

## What it does not do

- It has no scheduler or background task runner; periodic reloading of the
  loaders is left to the application.
- It holds no storage of its own: the loaders read and write tables through
  the connection they are given.
- Of the chain node clients, only zkSync Lite balance lookups and EVM gas
  estimation over JSON-RPC are provided.

## Requirements

Python 3.10 or newer. Keccak hashing uses `pycryptodome`.