"""
PowerChain Client - Main Entry Point
Logs in through a node wallet, reports status and follows account changes
"""

import os
import asyncio
import signal
import sys
from loguru import logger
from dotenv import load_dotenv
from web3 import AsyncHTTPProvider, AsyncWeb3

from powerchain import ChainClient, NodeWalletProvider, PowerChainError
from powerchain.wallet_provider import ACCOUNTS_CHANGED

load_dotenv()


def configure_logging():
    """Console and rotating file sinks"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="INFO"
    )
    logger.add(
        "data/logs/powerchain.log",
        rotation="1 day",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        level="DEBUG"
    )


class PowerChainRunner:
    """Runs the client against a node until interrupted"""

    def __init__(self):
        self.rpc_url = os.getenv('POWERCHAIN_RPC_URL', 'http://127.0.0.1:8545')
        self.poll_interval = float(os.getenv('POWERCHAIN_POLL_INTERVAL', '2.0'))
        chain_id = os.getenv('POWERCHAIN_CHAIN_ID')
        self.chain_id = int(chain_id) if chain_id else None

        self.wallet = None
        self.client = None
        self.running = False
        self.report_task = None

    async def start(self):
        """Connect, log in and watch for account changes"""
        logger.info("=" * 70)
        logger.info("PowerChain client starting...")
        logger.info("=" * 70)

        w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        if not await w3.is_connected():
            raise PowerChainError(f"Cannot connect to node at {self.rpc_url}")

        self.wallet = await NodeWalletProvider.connect(w3)
        self.client = ChainClient(self.wallet, w3)

        await self.client.login()
        await self.report()

        # Re-report whenever the node's accounts change
        self.wallet.on(ACCOUNTS_CHANGED, self._schedule_report)

        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, self.stop)
        loop.add_signal_handler(signal.SIGTERM, self.stop)

        self.running = True
        await self.wallet.watch_accounts(self.poll_interval)

    def _schedule_report(self, accounts):
        """Run report() in the background, replacing any report still in flight"""
        if self.report_task is not None and not self.report_task.done():
            self.report_task.cancel()

        self.report_task = asyncio.ensure_future(self.report())
        self.report_task.add_done_callback(self._on_report_done)
        return self.report_task

    @staticmethod
    def _on_report_done(task):
        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Account report failed: {error}")

    async def report(self):
        """Log network, account and balances"""
        if self.client.account is None:
            logger.warning("No active account")
            return

        logger.info(f"  Network: {self.client.get_network_name()}")
        logger.info(f"  Account: {self.client.account}")
        logger.info(f"  LIT balance: {await self.client.get_token_balance()}")
        logger.info(f"  Registry allowance: {await self.client.get_allowance()}")

        if self.chain_id is not None:
            details = await self.client.get_user_details(self.chain_id)
            logger.info(f"  Chain {self.chain_id}: deposit {details.deposit}, vesting {details.vesting}")

    def stop(self):
        """Stop watching and release the subscription"""
        if not self.running:
            return

        logger.info("Shutting down PowerChain client...")
        self.running = False

        if self.report_task is not None and not self.report_task.done():
            self.report_task.cancel()
        if self.wallet:
            self.wallet.stop()
        if self.client:
            self.client.close()


async def main():
    """Main entry point"""
    runner = PowerChainRunner()
    await runner.start()


if __name__ == "__main__":
    configure_logging()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except PowerChainError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error in main: {e}")
        sys.exit(1)
