"""Names of supported chains."""

ARBITRUM_NOVA = "ArbitrumNovaMainnet"
ZKSYNC_ERA = "ZksyncMainnet"
LINEA = "LineaMainnet"
SCROLL = "ScrollMainnet"
POLYGON_ZKEVM = "PolygonZkMainnet"
STARKNET = "StarknetMainnet"
KROMA = "KromaMainnet"
MANTA = "MantaMainnet"
MODE = "ModeMainnet"
ZKFAIR = "ZkfairMainnet"
BNB_CHAIN = "BnbMainnet"
OPBNB = "OpbnbMainnet"
METIS = "MetisMainnet"
PGN = "PgnMainnet"
MANTLE = "MantleMainnet"
ZETA = "ZetaMainnet"
MAPO = "MAPMainnet"
ZORA = "ZoraMainnet"
BEVM = "BevmMainnet"
ANCIENT8 = "Ancient8Mainnet"
BLAST = "BlastMainnet"
ETHEREUM = "EthereumMainnet"
BASE = "BaseMainnet"
ARBITRUM = "ArbitrumOneMainnet"
POLYGON = "PolygonPoSMainnet"
OPTIMISM = "OptimismMainnet"
FRAXTAL = "FraxtalMainnet"
ASTAR_ZKEVM = "AstarMainnet"
ZKLINK_NOVA = "ZklinkMainnet"
INEVM = "InEVMMainnet"
MERLIN = "MerlinMainnet"
BEVM2 = "Bevm2Mainnet"
SOLANA = "SolanaMainnet"
ZKSYNC_LITE = "ZksLiteMainnet"
CORE = "CoreMainnet"
XLAYER = "XLayerMainnet"
TAPROOT = "TaprootMainnet"
BITCOIN = "BitcoinMainnet"
BOB = "BobMainnet"
AILAYER = "AILayerMainnet"
BOUNCE_BIT = "BounceBitMainnet"
MINT = "MintMainnet"
CYBER = "CyberMainnet"
ORANGE = "OrangeMainnet"
BSQUARED = "BsquaredMainnet"
FUSE = "FuseMainnet"
GRAVITY = "GravityMainnet"
RARI = "RARIMainnet"
TAIKO = "TaikoMainnet"
ALIENX = "AlienXMainnet"
BITLAYER = "BitlayerMainnet"
REDSTONE = "RedstoneMainnet"
SWAN = "SwanMainnet"
BITCOIN_TEST = "BitcoinTestnet"
FRACTAL_BITCOIN = "FractalBitcoinMainnet"
FRACTAL_BITCOIN_TEST = "FractalBitcoinTestnet"