"""
v3ops/chain.py

This is the on-chain execution layer:
- Connect to RPC and check we are on the expected chain
- Sign with the configured account (PRIVATE_KEY, or the local dev key on katana)
- Read/write ERC20, V3 factory, V3 pool and NonfungiblePositionManager
- Deploy contracts from Hardhat artifacts

Important:
- Every write goes through _build_and_send, which fills nonce, chain id,
  EIP-1559 fee fields and gas before signing.
- Amounts are integers in token base units; to_base_units/format_units
  convert to and from human decimal amounts.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Optional

from eth_account import Account
from eth_utils import keccak
from web3 import Web3
from web3.contract import Contract

from v3ops.abi import (
    ERC20_ABI,
    FACTORY_ABI,
    POOL_ABI,
    POSITION_MANAGER_ABI,
)
from v3ops.config import ZERO_ADDRESS

TRANSFER_TOPIC = "0x" + keccak(text="Transfer(address,address,uint256)").hex()
INCREASE_LIQUIDITY_TOPIC = "0x" + keccak(text="IncreaseLiquidity(uint256,uint128,uint256,uint256)").hex()


@dataclass(frozen=True)
class TokenInfo:
    address: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class Slot0:
    sqrt_price_x96: int
    tick: int
    observation_index: int
    observation_cardinality: int
    observation_cardinality_next: int
    fee_protocol: int
    unlocked: bool


@dataclass(frozen=True)
class Position:
    token_id: int
    nonce: int
    operator: str
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    fee_growth_inside0_last_x128: int
    fee_growth_inside1_last_x128: int
    tokens_owed0: int
    tokens_owed1: int


@dataclass(frozen=True)
class MintParams:
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    amount0_desired: int
    amount1_desired: int
    amount0_min: int
    amount1_min: int
    recipient: str
    deadline: int

    def as_tuple(self) -> tuple:
        """Positional tuple in the order of the mint(params) struct."""
        return (
            Web3.to_checksum_address(self.token0),
            Web3.to_checksum_address(self.token1),
            int(self.fee),
            int(self.tick_lower),
            int(self.tick_upper),
            int(self.amount0_desired),
            int(self.amount1_desired),
            int(self.amount0_min),
            int(self.amount1_min),
            Web3.to_checksum_address(self.recipient),
            int(self.deadline),
        )


def to_base_units(amount: Any, decimals: int = 18) -> int:
    """Convert a decimal amount ("1000", 0.5, Decimal) into token base units."""
    d = Decimal(str(amount))
    if not d.is_finite() or d < 0:
        raise ValueError(f"Amount must be a non-negative number: {amount}")
    with localcontext() as ctx:
        ctx.prec = 100
        return int((d * 10 ** decimals).to_integral_value(rounding=ROUND_DOWN))


def format_units(value: int, decimals: int = 18) -> str:
    """Render base units as a plain decimal string, e.g. 1500000 @6 -> '1.5'."""
    value = int(value)
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10 ** decimals)
    frac_s = str(frac).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{sign}{whole}.{frac_s}" if frac_s else f"{sign}{whole}"


def _topic_hex(topic: Any) -> str:
    if isinstance(topic, (bytes, bytearray)):
        return "0x" + bytes(topic).hex()
    s = str(topic)
    return s if s.startswith("0x") else "0x" + s


def token_id_from_receipt(receipt: Any, position_manager: str) -> int:
    """
    Find the position NFT id minted in a receipt.

    Looks for IncreaseLiquidity(tokenId indexed, ...) or the ERC721 mint
    Transfer(from=0x0, to, tokenId) emitted by the position manager.
    """
    npm = position_manager.lower()
    zero_topic = "0x" + "00" * 32

    for log in receipt["logs"]:
        if str(log["address"]).lower() != npm:
            continue
        topics = [_topic_hex(t).lower() for t in log["topics"]]
        if not topics:
            continue
        if topics[0] == INCREASE_LIQUIDITY_TOPIC and len(topics) >= 2:
            return int(topics[1], 16)
        if topics[0] == TRANSFER_TOPIC and len(topics) == 4 and topics[1] == zero_topic:
            return int(topics[3], 16)

    raise RuntimeError("Mint event not found in transaction logs")


class Chain:
    def __init__(self, rpc_url: str, private_key: str, expected_chain_id: Optional[int] = None, timeout_s: int = 120):
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not self.w3.is_connected():
            raise RuntimeError(f"Could not connect to RPC: {rpc_url}")

        self.chain_id = int(self.w3.eth.chain_id)
        if expected_chain_id is not None and self.chain_id != int(expected_chain_id):
            raise RuntimeError(f"Wrong chain ID. Expected {expected_chain_id}, got {self.chain_id}")

        self.account = Account.from_key(private_key)
        self.address = self.account.address
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, cfg) -> "Chain":
        return cls(cfg.rpc_url, cfg.private_key, expected_chain_id=cfg.chain_id, timeout_s=cfg.tx_timeout_s)

    def _build_and_send(self, tx: dict[str, Any]) -> str:
        """
        Sign and broadcast a transaction from self.account.

        Important:
        - Use EIP-1559 dynamic fee fields (maxFeePerGas, maxPriorityFeePerGas)
          when the node reports baseFeePerGas.
        - Do NOT mix gasPrice into a typed transaction; eth-account rejects it.
        """
        tx.setdefault("from", self.address)
        tx.setdefault("nonce", self.w3.eth.get_transaction_count(self.address))
        tx.setdefault("chainId", self.chain_id)

        latest_block = self.w3.eth.get_block("latest")
        base_fee = latest_block.get("baseFeePerGas")

        if base_fee is None:
            # No EIP-1559 on this chain: legacy gasPrice only.
            tx.setdefault("gasPrice", self.w3.eth.gas_price)
            tx.pop("maxFeePerGas", None)
            tx.pop("maxPriorityFeePerGas", None)
        else:
            priority = self.w3.eth.max_priority_fee
            # Standard approach: maxFee = 2*baseFee + priority
            max_fee = int(base_fee * 2 + priority)
            tx.setdefault("maxPriorityFeePerGas", int(priority))
            tx.setdefault("maxFeePerGas", int(max_fee))
            tx.setdefault("type", 2)
            tx.pop("gasPrice", None)

        # Gas estimation (do this after fee fields are present)
        if "gas" not in tx:
            tx["gas"] = self.w3.eth.estimate_gas(tx)

        signed = self.account.sign_transaction(tx)

        # web3.py / eth-account compatibility: handle rawTransaction vs raw_transaction
        raw = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction")
        tx_hash = self.w3.eth.send_raw_transaction(raw)

        return Web3.to_hex(tx_hash)

    def send(self, fn, value: int = 0) -> str:
        """Build a contract function call as a transaction and send it."""
        params: dict[str, Any] = {"from": self.address}
        if value:
            params["value"] = int(value)
        tx = fn.build_transaction(params)
        return self._build_and_send(tx)

    def wait_receipt(self, tx_hash: str) -> Any:
        """Wait for a transaction receipt."""
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout_s)

    @staticmethod
    def require_success(receipt: Any, what: str) -> Any:
        if receipt["status"] != 1:
            raise RuntimeError(f"{what} reverted (tx {_topic_hex(receipt['transactionHash'])})")
        return receipt

    def transact(self, fn, what: str, value: int = 0) -> Any:
        """send + wait + require_success, returning the receipt."""
        tx_hash = self.send(fn, value=value)
        return self.require_success(self.wait_receipt(tx_hash), what)

    # ----------------------------
    # Generic helpers
    # ----------------------------

    def contract(self, address: str, abi: list[dict[str, Any]]) -> Contract:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def has_code(self, address: str) -> int:
        """Deployed bytecode size at address (0 when nothing is deployed)."""
        code = self.w3.eth.get_code(Web3.to_checksum_address(address))
        return len(code)

    def deploy_contract(self, abi: list[dict[str, Any]], bytecode: str, *args: Any) -> str:
        """Deploy a contract and return its address."""
        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        tx = factory.constructor(*args).build_transaction({"from": self.address})
        rcpt = self.wait_receipt(self._build_and_send(tx))

        if rcpt.status != 1:
            raise RuntimeError("Contract deployment reverted")

        return rcpt.contractAddress

    # ----------------------------
    # ERC20
    # ----------------------------

    def erc20(self, address: str) -> Contract:
        return self.contract(address, ERC20_ABI)

    def token_info(self, address: str) -> TokenInfo:
        token = self.erc20(address)
        return TokenInfo(
            address=Web3.to_checksum_address(address),
            symbol=token.functions.symbol().call(),
            decimals=int(token.functions.decimals().call()),
        )

    def balance_of(self, token_addr: str, owner: Optional[str] = None) -> int:
        owner = owner or self.address
        return int(self.erc20(token_addr).functions.balanceOf(Web3.to_checksum_address(owner)).call())

    def approve(self, token_addr: str, spender: str, amount: int) -> Any:
        """Approve spender to pull `amount` base units of token from our account."""
        fn = self.erc20(token_addr).functions.approve(Web3.to_checksum_address(spender), int(amount))
        return self.transact(fn, f"approve({spender})")

    # ----------------------------
    # V3 factory / pool
    # ----------------------------

    def get_pool(self, factory_addr: str, token_a: str, token_b: str, fee: int) -> Optional[str]:
        """Pool address for the pair and fee, or None if it does not exist yet."""
        factory = self.contract(factory_addr, FACTORY_ABI)
        pool = factory.functions.getPool(
            Web3.to_checksum_address(token_a),
            Web3.to_checksum_address(token_b),
            int(fee),
        ).call()
        if pool is None or pool.lower() == ZERO_ADDRESS:
            return None
        return Web3.to_checksum_address(pool)

    def create_pool(self, factory_addr: str, token_a: str, token_b: str, fee: int) -> Any:
        factory = self.contract(factory_addr, FACTORY_ABI)
        fn = factory.functions.createPool(
            Web3.to_checksum_address(token_a),
            Web3.to_checksum_address(token_b),
            int(fee),
        )
        return self.transact(fn, "createPool")

    def estimate_create_pool(self, factory_addr: str, token_a: str, token_b: str, fee: int) -> tuple[int, int]:
        """(gas, gas * gas_price in wei) for createPool."""
        factory = self.contract(factory_addr, FACTORY_ABI)
        gas = factory.functions.createPool(
            Web3.to_checksum_address(token_a),
            Web3.to_checksum_address(token_b),
            int(fee),
        ).estimate_gas({"from": self.address})
        return int(gas), int(gas) * int(self.w3.eth.gas_price)

    def slot0(self, pool_addr: str) -> Slot0:
        values = self.contract(pool_addr, POOL_ABI).functions.slot0().call()
        return Slot0(*[v if isinstance(v, bool) else int(v) for v in values])

    def liquidity(self, pool_addr: str) -> int:
        return int(self.contract(pool_addr, POOL_ABI).functions.liquidity().call())

    def initialize_pool(self, pool_addr: str, sqrt_price_x96: int) -> Any:
        fn = self.contract(pool_addr, POOL_ABI).functions.initialize(int(sqrt_price_x96))
        return self.transact(fn, "initialize")

    # ----------------------------
    # NonfungiblePositionManager
    # ----------------------------

    def mint_position(self, npm_addr: str, params: MintParams) -> Any:
        fn = self.contract(npm_addr, POSITION_MANAGER_ABI).functions.mint(params.as_tuple())
        return self.transact(fn, "mint")

    def position(self, npm_addr: str, token_id: int) -> Position:
        values = self.contract(npm_addr, POSITION_MANAGER_ABI).functions.positions(int(token_id)).call()
        (nonce, operator, token0, token1, fee, tick_lower, tick_upper, liquidity,
         fg0, fg1, owed0, owed1) = values
        return Position(
            token_id=int(token_id),
            nonce=int(nonce),
            operator=operator,
            token0=token0,
            token1=token1,
            fee=int(fee),
            tick_lower=int(tick_lower),
            tick_upper=int(tick_upper),
            liquidity=int(liquidity),
            fee_growth_inside0_last_x128=int(fg0),
            fee_growth_inside1_last_x128=int(fg1),
            tokens_owed0=int(owed0),
            tokens_owed1=int(owed1),
        )

    def owner_of(self, npm_addr: str, token_id: int) -> str:
        return self.contract(npm_addr, POSITION_MANAGER_ABI).functions.ownerOf(int(token_id)).call()
