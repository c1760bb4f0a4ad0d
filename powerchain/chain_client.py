"""
PowerChain Client
Wallet login, LIT token and PowerChain registry calls over web3.py
"""

import functools
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from web3 import AsyncWeb3, Web3
from web3.datastructures import AttributeDict
from loguru import logger

from utils.units import TokenAmount, from_lit_precision_to_tokens, tokens_to_lit_precision

from .abi import (
    ZERO_ADDRESS,
    get_erc20_abi,
    get_erc20_contract_address,
    get_powerchain_registry_abi,
    get_powerchain_registry_address,
    get_registry_output_names,
)
from .exceptions import InsufficientBalanceError, MissingClientError, NoAccountsError
from .networks import get_network_name
from .wallet_provider import ACCOUNTS_CHANGED, Subscription, WalletProvider

# Output fields holding LIT amounts, per registry read
STATIC_DETAILS_TOKEN_FIELDS = ('minRequiredDeposit', 'minRequiredVesting', 'rewardBonusRequiredVesting')
DYNAMIC_DETAILS_TOKEN_FIELDS = ('totalVesting',)
USER_DETAILS_TOKEN_FIELDS = ('deposit', 'vesting')


@dataclass(frozen=True)
class ContractBindings:
    """Token and registry proxies, always replaced together"""

    erc20: Any
    registry: Any
    erc20_address: str
    registry_address: str
    registry_abi: List[Dict]


def requires_login(method):
    """Log in first when no account is active, then run the call"""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        await self.ensure_login()
        return await method(self, *args, **kwargs)

    return wrapper


def _is_zero_validator(validator) -> bool:
    if not validator:
        return True

    if isinstance(validator, str):
        try:
            return int(validator, 0) == 0
        except ValueError:
            return False

    return validator == 0


def _decode_record(abi: List[Dict], function_name: str, result, token_fields=()) -> Any:
    """
    Name a multi-value read result after the ABI outputs

    Unnamed outputs take the built-in registry ABI's name at the same
    position, or output<i> past its end. Token amount fields are always
    converted to human units.
    """
    outputs = []
    for entry in abi:
        if entry.get('type') == 'function' and entry.get('name') == function_name:
            outputs = entry.get('outputs', [])
            break

    values = list(result) if isinstance(result, (list, tuple)) else [result]
    default_names = get_registry_output_names(function_name)

    names = [out.get('name') for out in outputs] or [None] * len(values)
    names = [
        name or (default_names[i] if i < len(default_names) else f"output{i}")
        for i, name in enumerate(names)
    ]

    record = dict(zip(names, values))

    for field in token_fields:
        if field in record:
            record[field] = from_lit_precision_to_tokens(record[field])

    return AttributeDict(record)


class ChainClient:
    """
    Async client for the LIT token and the PowerChain registry

    Holds the active account and both contract proxies. Every call that acts
    for an account goes through requires_login.
    """

    def __init__(self, wallet_provider: WalletProvider, w3: AsyncWeb3):
        """
        Initialize PowerChain Client

        Args:
            wallet_provider: Wallet that authorizes accounts and signs
            w3: AsyncWeb3 instance used to build contract proxies
        """
        if wallet_provider is None or w3 is None or getattr(w3, 'provider', None) is None:
            logger.error("Wallet provider or web3 client missing")
            raise MissingClientError('No ethereum compatible client installed')

        self.wallet = wallet_provider
        self.w3 = w3

        self._network = get_network_name(getattr(wallet_provider, 'network_version', None))
        if self._network is None:
            logger.warning(
                f"Unrecognised network version {getattr(wallet_provider, 'network_version', None)!r}"
            )

        self._account: Optional[str] = None
        self._accounts_subscription: Optional[Subscription] = None
        self._contracts: Optional[ContractBindings] = None

        self._initialize(
            get_erc20_abi(self._network),
            get_powerchain_registry_abi(self._network),
            get_erc20_contract_address(self._network),
            get_powerchain_registry_address(self._network)
        )

        logger.info(f"PowerChain client initialized on network: {self._network}")

    def _initialize(
        self,
        erc20_abi: List[Dict],
        registry_abi: List[Dict],
        erc20_address: str,
        registry_address: str
    ):
        """Bind both contract proxies"""
        erc20_address = Web3.to_checksum_address(erc20_address)
        registry_address = Web3.to_checksum_address(registry_address)

        self._contracts = ContractBindings(
            erc20=self.w3.eth.contract(address=erc20_address, abi=erc20_abi),
            registry=self.w3.eth.contract(address=registry_address, abi=registry_abi),
            erc20_address=erc20_address,
            registry_address=registry_address,
            registry_abi=registry_abi
        )

        logger.info(f"LIT token bound at {erc20_address}, registry at {registry_address}")

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    def has_metamask(self) -> bool:
        """Whether the wallet identifies itself as MetaMask"""
        return bool(getattr(self.wallet, 'is_metamask', False))

    @property
    def account(self) -> Optional[str]:
        """The active account, or None before login"""
        return self._account

    @property
    def subscribed(self) -> bool:
        """Whether account changes are being followed"""
        return self._accounts_subscription is not None

    async def login(self) -> str:
        """
        Request account authorization from the wallet

        Returns:
            The active account

        Raises:
            NoAccountsError: If the wallet authorized no accounts
        """
        accounts = await self.wallet.enable()

        if not accounts:
            logger.error("Wallet returned no accounts")
            raise NoAccountsError('User has no MetaMask accounts')

        self._account = Web3.to_checksum_address(accounts[0])

        if self._accounts_subscription is None:
            self._accounts_subscription = self.wallet.on(ACCOUNTS_CHANGED, self._on_accounts_changed)

        logger.success(f"Logged in as {self._account}")
        return self._account

    async def ensure_login(self):
        """Log in only if no account is active"""
        if self._account is None:
            await self.login()

    def _on_accounts_changed(self, accounts: List[str]):
        self._account = Web3.to_checksum_address(accounts[0]) if accounts else None
        logger.warning(f"Active account changed to {self._account}")

    def close(self):
        """Stop following account changes"""
        if self._accounts_subscription is not None:
            self._accounts_subscription.unsubscribe()
            self._accounts_subscription = None
            logger.info("Account change subscription removed")

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def reinitialize(
        self,
        erc20_abi: Optional[List[Dict]] = None,
        registry_abi: Optional[List[Dict]] = None,
        erc20_address: Optional[str] = None,
        registry_address: Optional[str] = None
    ):
        """
        Rebind both contract proxies

        Any argument left as None uses the default for the current network.
        The active account is kept.
        """
        self._initialize(
            erc20_abi if erc20_abi is not None else get_erc20_abi(self._network),
            registry_abi if registry_abi is not None else get_powerchain_registry_abi(self._network),
            erc20_address or get_erc20_contract_address(self._network),
            registry_address or get_powerchain_registry_address(self._network)
        )

    def get_network_name(self) -> Optional[str]:
        return self._network

    @property
    def erc20_contract(self):
        return self._contracts.erc20

    @property
    def registry_contract(self):
        return self._contracts.registry

    @property
    def registry_address(self) -> str:
        return self._contracts.registry_address

    async def _send(self, contract, function_name: str, *args):
        """Submit a state-changing call from the active account"""
        logger.debug(f"{function_name}{args} from {self._account}")
        return await getattr(contract.functions, function_name)(*args).transact({
            'from': self._account
        })

    async def _call(self, contract, function_name: str, *args):
        return await getattr(contract.functions, function_name)(*args).call()

    # ------------------------------------------------------------------
    # LIT token
    # ------------------------------------------------------------------

    @requires_login
    async def mint(self, tokens: TokenAmount):
        """Mint tokens to the active account"""
        return await self._send(
            self._contracts.erc20, 'mint', self._account, tokens_to_lit_precision(tokens)
        )

    @requires_login
    async def approve(self, tokens: TokenAmount):
        """Allow the registry to pull tokens from the active account"""
        return await self._send(
            self._contracts.erc20,
            'approve',
            self._contracts.registry_address,
            tokens_to_lit_precision(tokens)
        )

    @requires_login
    async def get_token_balance(self) -> Decimal:
        """LIT balance of the active account"""
        balance = await self._call(self._contracts.erc20, 'balanceOf', self._account)
        return from_lit_precision_to_tokens(balance)

    @requires_login
    async def get_allowance(self) -> Decimal:
        """How many tokens the registry may still pull from the active account"""
        allowance = await self._call(
            self._contracts.erc20, 'allowance', self._account, self._contracts.registry_address
        )
        return from_lit_precision_to_tokens(allowance)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @requires_login
    async def register_chain(
        self,
        description: str,
        init_endpoint: str,
        chain_validator: Optional[Union[str, int]],
        min_required_deposit: TokenAmount,
        min_required_vesting: TokenAmount,
        reward_bonus_required_vesting: TokenAmount,
        reward_bonus_percentage: int,
        notary_period: int,
        max_validators: int,
        max_transactors: int,
        notary_vesting: bool,
        notary_participation: bool
    ):
        """
        Register a new chain in the registry

        A falsy or zero validator registers the chain without one.
        """
        if _is_zero_validator(chain_validator):
            chain_validator = ZERO_ADDRESS
        else:
            chain_validator = Web3.to_checksum_address(chain_validator)

        return await self._send(
            self._contracts.registry,
            'registerChain',
            description,
            init_endpoint,
            chain_validator,
            tokens_to_lit_precision(min_required_deposit),
            tokens_to_lit_precision(min_required_vesting),
            tokens_to_lit_precision(reward_bonus_required_vesting),
            reward_bonus_percentage,
            notary_period,
            max_validators,
            max_transactors,
            notary_vesting,
            notary_participation
        )

    @requires_login
    async def get_chain_static_details(self, chain_id: int):
        result = await self._call(self._contracts.registry, 'getChainStaticDetails', chain_id)
        return _decode_record(
            self._contracts.registry_abi, 'getChainStaticDetails', result, STATIC_DETAILS_TOKEN_FIELDS
        )

    @requires_login
    async def get_chain_dynamic_details(self, chain_id: int):
        result = await self._call(self._contracts.registry, 'getChainDynamicDetails', chain_id)
        return _decode_record(
            self._contracts.registry_abi, 'getChainDynamicDetails', result, DYNAMIC_DETAILS_TOKEN_FIELDS
        )

    @requires_login
    async def get_user_details(self, chain_id: int):
        """
        Deposit and vesting of the active account in a chain

        Returns:
            AttributeDict with deposit and vesting in human units
        """
        result = await self._call(
            self._contracts.registry, 'getUserDetails', chain_id, self._account
        )
        return _decode_record(
            self._contracts.registry_abi, 'getUserDetails', result, USER_DETAILS_TOKEN_FIELDS
        )

    @requires_login
    async def request_vest_in_chain(self, chain_id: int, tokens: TokenAmount):
        return await self._send(
            self._contracts.registry, 'requestVestInChain', chain_id, tokens_to_lit_precision(tokens)
        )

    @requires_login
    async def add_to_vest_in_chain(self, chain_id: int, tokens: TokenAmount):
        """Request vesting of the current vesting plus tokens"""
        user_details = await self.get_user_details(chain_id)
        new_vesting = Decimal(user_details.vesting) + Decimal(str(tokens))

        return await self.request_vest_in_chain(chain_id, new_vesting)

    @requires_login
    async def confirm_vest_in_chain(self, chain_id: int):
        return await self._send(self._contracts.registry, 'confirmVestInChain', chain_id)

    @requires_login
    async def request_deposit_in_chain(self, chain_id: int, tokens: TokenAmount):
        return await self._send(
            self._contracts.registry, 'requestDepositInChain', chain_id, tokens_to_lit_precision(tokens)
        )

    @requires_login
    async def add_to_deposit_in_chain(self, chain_id: int, tokens: TokenAmount):
        """Request a deposit of the current deposit plus tokens"""
        user_details = await self.get_user_details(chain_id)
        new_deposit = Decimal(user_details.deposit) + Decimal(str(tokens))

        return await self.request_deposit_in_chain(chain_id, new_deposit)

    @requires_login
    async def withdraw_vest_in_chain(self, chain_id: int, tokens: TokenAmount):
        """
        Request vesting reduced by tokens

        Raises:
            InsufficientBalanceError: If tokens exceed the current vesting
        """
        user_details = await self.get_user_details(chain_id)
        total_vesting = Decimal(user_details.vesting)
        tokens = Decimal(str(tokens))

        if tokens > total_vesting:
            logger.error(f"Withdrawal of {tokens} exceeds vesting {total_vesting} in chain {chain_id}")
            raise InsufficientBalanceError('vesting', total_vesting, tokens)

        return await self.request_vest_in_chain(chain_id, total_vesting - tokens)

    @requires_login
    async def withdraw_deposit_in_chain(self, chain_id: int, tokens: TokenAmount):
        """
        Request a deposit reduced by tokens

        Raises:
            InsufficientBalanceError: If tokens exceed the current deposit
        """
        user_details = await self.get_user_details(chain_id)
        total_deposit = Decimal(user_details.deposit)
        tokens = Decimal(str(tokens))

        if tokens > total_deposit:
            logger.error(f"Withdrawal of {tokens} exceeds deposit {total_deposit} in chain {chain_id}")
            raise InsufficientBalanceError('deposit', total_deposit, tokens)

        return await self.request_deposit_in_chain(chain_id, total_deposit - tokens)

    @requires_login
    async def confirm_deposit_withdrawal_from_chain(self, chain_id: int):
        return await self._send(self._contracts.registry, 'confirmDepositWithdrawalFromChain', chain_id)

    @requires_login
    async def start_mining(self, chain_id: int):
        return await self._send(self._contracts.registry, 'startMining', chain_id)

    @requires_login
    async def stop_mining(self, chain_id: int):
        return await self._send(self._contracts.registry, 'stopMining', chain_id)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @requires_login
    async def get_transaction(self, transaction_hash):
        return await self.w3.eth.get_transaction(transaction_hash)

    @requires_login
    async def wait_for_transaction_receipt(self, transaction_hash, timeout: float = 120):
        """Wait until a submitted transaction is mined and return its receipt"""
        return await self.w3.eth.wait_for_transaction_receipt(transaction_hash, timeout=timeout)
