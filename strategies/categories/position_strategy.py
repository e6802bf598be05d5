"""
Position Strategy - template for the BullBear basket strategies

Every strategy runs the same cycle and only supplies the scoring and exit
rules:

1. Connect and check the USDC balance (too little skips the cycle)
2. Load state, fetch a market snapshot, update strategy history
3. Drop expired blacklist entries and tracked positions gone from chain
4. Evaluate exits for tracked positions and close the ones that qualify
5. Rank opportunities and open the best ones into the free slots
6. Record ``lastRun`` and save state
"""

import asyncio
from abc import abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set

from exchange_clients.base_models import PositionAsset, Position, format_leverage
from helpers.unified_logger import log_stage
from strategies.base_strategy import BaseStrategy
from strategies.components import (
    AssetBlacklist,
    CycleSummary,
    ExitDecision,
    JsonStateStore,
    MarketSnapshot,
    Opportunity,
    PositionExecutor,
    TrackedPosition,
    TradeHistory,
)
from strategies.components.indicators import is_perp, weighted_pnl
from strategies.components.models import now_ms
from strategies.components.opportunity_table import (
    build_opportunity_table,
    build_positions_table,
    print_table,
)

from .position_config import PositionStrategyConfig


class PositionStrategy(BaseStrategy):
    """
    Base class for strategies that open and close basket positions.

    Subclasses set ``STRATEGY_CODE``/``DISPLAY_NAME`` and implement
    ``find_opportunities`` and ``check_exit``. Optional hooks:
    ``update_history``, ``on_cycle_start``, ``build_assets``,
    ``select_leverage``, ``position_extra``, ``after_open``, ``after_close``.
    """

    STRATEGY_CODE = ""
    DISPLAY_NAME = ""
    CONFIG_CLASS = PositionStrategyConfig

    def __init__(self, config: PositionStrategyConfig, exchange_client=None):
        super().__init__(config, exchange_client)

        self.state_store = JsonStateStore(
            config.state_path(self.STRATEGY_CODE),
            defaults=self.default_state(),
            logger=self.logger,
        )
        self.trade_history = TradeHistory(config.history_path(self.STRATEGY_CODE), logger=self.logger)
        self.executor = PositionExecutor(
            exchange_client,
            self.logger,
            dry_run=config.dry_run,
            max_attempts=config.max_tx_attempts,
            retry_delay=config.retry_delay_seconds,
            open_retry_attempts=config.open_retry_attempts,
            close_retry_attempts=config.close_retry_attempts,
            empty_result_delay=config.empty_result_retry_delay_seconds,
        )

        self.state: Dict[str, Any] = self.default_state()
        self.blacklist = AssetBlacklist(self.state, config.blacklist_hours)

    def get_strategy_name(self) -> str:
        return self.DISPLAY_NAME or type(self).__name__

    # ========================================================================
    # State
    # ========================================================================

    def default_state(self) -> Dict[str, Any]:
        return {"positions": {}, "assetBlacklist": {}, "lastRun": None}

    def load_state(self) -> Dict[str, Any]:
        self.state = self.state_store.load()
        if not isinstance(self.state.get("positions"), dict):
            # Older files kept positions as a list of {"id": ...} records
            self.state["positions"] = {
                str(item["id"]): item
                for item in self.state.get("positions") or []
                if isinstance(item, dict) and item.get("id") is not None
            }
        self.blacklist = AssetBlacklist(self.state, self.config.blacklist_hours)
        return self.state

    def save_state(self) -> None:
        self.state_store.save(self.state)

    @property
    def positions(self) -> Dict[str, Dict[str, Any]]:
        return self.state["positions"]

    def tracked_positions(self) -> List[TrackedPosition]:
        return [TrackedPosition.from_dict(pid, data) for pid, data in self.positions.items()]

    def held_denoms(self) -> Set[str]:
        return {denom for tracked in self.tracked_positions() for denom in tracked.denoms}

    # ========================================================================
    # Hooks
    # ========================================================================

    def update_history(self, snapshot: MarketSnapshot) -> None:
        """Record strategy-specific samples into ``self.state``."""

    def on_cycle_start(self, snapshot: MarketSnapshot) -> None:
        """Runs after the blacklist is pruned, before exits are evaluated."""

    @abstractmethod
    def find_opportunities(self, snapshot: MarketSnapshot) -> List[Opportunity]:
        """Return candidates sorted best first."""

    @abstractmethod
    def check_exit(
        self,
        tracked: TrackedPosition,
        position: Optional[Position],
        snapshot: MarketSnapshot,
    ) -> ExitDecision:
        """Decide whether a tracked position should be closed."""

    def build_assets(
        self,
        opportunity: Opportunity,
        opportunities: List[Opportunity],
        snapshot: MarketSnapshot,
    ) -> List[PositionAsset]:
        return [opportunity.leg("1.0")]

    def select_leverage(self, opportunity: Opportunity, snapshot: MarketSnapshot) -> Decimal:
        leverage = Decimal(str(opportunity.leverage)) if opportunity.leverage is not None else self.config.leverage
        market_max = snapshot.max_leverage(opportunity.denom)
        return min(leverage, market_max) if market_max is not None else leverage

    def position_extra(self, opportunity: Opportunity) -> Dict[str, Any]:
        """Extra fields stored with a newly tracked position."""
        return {}

    def after_open(self, tracked: TrackedPosition, opportunity: Opportunity) -> None:
        pass

    def after_close(self, tracked: TrackedPosition, decision: ExitDecision) -> None:
        for denom in tracked.denoms:
            if is_perp(denom):
                until = self.blacklist.add(denom, reason=decision.reason)
                self.logger.info(f"Blacklisted {denom} until {until}")

    # ========================================================================
    # Helpers for subclasses
    # ========================================================================

    def eligible_markets(self, snapshot: MarketSnapshot, respect_blacklist: bool = True):
        """Enabled markets that are not blacklisted and not already held."""
        held = self.held_denoms()
        for market in snapshot.markets:
            if respect_blacklist and self.blacklist.is_blacklisted(market.denom):
                self.debug(f"Skipping {market.denom}: blacklisted")
                continue
            if market.denom in held:
                self.debug(f"Skipping {market.denom}: already in an active position")
                continue
            yield market

    def position_pnl(self, tracked: TrackedPosition, snapshot: MarketSnapshot) -> float:
        return weighted_pnl(tracked.assets, tracked.entry_prices, snapshot.prices)

    def standard_exit(self, tracked: TrackedPosition, pnl: Optional[float]) -> Optional[ExitDecision]:
        """Max hold time, take profit and stop loss from the config."""
        cfg = self.config
        hold_hours = tracked.hold_hours()
        if cfg.max_position_hours is not None and hold_hours > cfg.max_position_hours:
            self.logger.warning(f"Position {tracked.id} reached max hold time ({hold_hours:.1f} hours)")
            return ExitDecision.exit("max_hold_time", pnl)
        if pnl is None:
            return None
        if cfg.take_profit_percent is not None and pnl >= cfg.take_profit_percent:
            self.logger.info(f"Position {tracked.id} reached take profit target: {pnl * 100:.2f}%")
            return ExitDecision.exit("take_profit", pnl)
        if cfg.stop_loss_percent is not None and pnl <= -cfg.stop_loss_percent:
            self.logger.warning(f"Position {tracked.id} hit stop loss: {pnl * 100:.2f}%")
            return ExitDecision.exit("stop_loss", pnl)
        return None

    def debug(self, message: str) -> None:
        if self.config.debug:
            self.logger.debug(message)

    # ========================================================================
    # Cycle
    # ========================================================================

    async def fetch_snapshot(self, balance: Decimal) -> MarketSnapshot:
        client = self.exchange_client
        markets = await client.get_markets()
        self.logger.info(f"Found {len(markets)} enabled markets")
        prices = await client.get_prices()
        funding_rates = await client.get_funding_rates()
        max_leverages = await client.get_max_leverages()
        positions = await client.get_positions()
        return MarketSnapshot(
            markets=markets,
            prices=prices,
            funding_rates=funding_rates,
            max_leverages=max_leverages,
            positions=positions,
            balance=balance,
        )

    async def execute_strategy(self) -> CycleSummary:
        summary = CycleSummary()
        log_stage(self.logger, f"{self.get_strategy_name()} cycle", icon="🔄")

        await self.exchange_client.connect()
        balance = await self.exchange_client.get_balance()
        self.logger.info(f"USDC balance: {balance}")

        required = self.config.required_balance()
        if balance < required:
            self.logger.error(f"Insufficient balance ({balance} USDC). Need at least {required} USDC.")
            summary.skipped = "insufficient_balance"
            return summary

        self.load_state()
        snapshot = await self.fetch_snapshot(balance)
        self.update_history(snapshot)

        for denom in self.blacklist.prune():
            self.logger.info(f"Removed {denom} from blacklist (expired)")

        self.on_cycle_start(snapshot)
        self._reconcile(snapshot)
        self.save_state()

        await self._manage_exits(snapshot, summary)

        open_count = len(self.positions)
        if open_count >= self.config.max_positions:
            self.logger.info(
                f"Already at max positions ({open_count}/{self.config.max_positions}). Not opening new positions."
            )
            summary.skipped = "max_positions"
        else:
            await self._open_new_positions(snapshot, summary)

        self.state["lastRun"] = now_ms()
        self.save_state()
        self.last_action_time = self.state["lastRun"]

        self.logger.info(
            f"{self.get_strategy_name()} cycle completed: "
            f"opened={len(summary.opened)} closed={len(summary.closed)}"
        )
        return summary

    def _reconcile(self, snapshot: MarketSnapshot) -> None:
        on_chain = {position.id for position in snapshot.positions}
        self.logger.info(
            f"Found {len(on_chain)} open positions, {len(self.positions)} tracked by {self.STRATEGY_CODE.upper()}"
        )
        for position_id in list(self.positions):
            if position_id in on_chain or PositionExecutor.is_dry_run_id(position_id):
                continue
            self.logger.warning(f"Position {position_id} no longer exists on-chain, removing from state")
            del self.positions[position_id]

    async def _manage_exits(self, snapshot: MarketSnapshot, summary: CycleSummary) -> None:
        pnl_by_id: Dict[str, float] = {}

        for position_id in list(self.positions):
            tracked = TrackedPosition.from_dict(position_id, self.positions[position_id])
            on_chain = snapshot.position(position_id)

            try:
                decision = self.check_exit(tracked, on_chain, snapshot)
            except Exception as e:
                self.logger.error(f"Error evaluating position {position_id}: {e}")
                continue

            # check_exit may update bookkeeping such as the peak PnL
            self.positions[position_id] = tracked.to_dict()
            if decision.pnl is not None:
                pnl_by_id[position_id] = decision.pnl

            if not decision.should_exit:
                pnl_text = f"{decision.pnl * 100:.2f}%" if decision.pnl is not None else "unknown"
                self.debug(f"Position {position_id} - Current PnL: {pnl_text}, holding...")
                continue

            await self._close(tracked, on_chain, decision, summary)

        if self.config.debug and self.positions:
            print_table(build_positions_table(f"{self.get_strategy_name()} positions", self.tracked_positions(), pnl_by_id))

    async def _close(
        self,
        tracked: TrackedPosition,
        on_chain: Optional[Position],
        decision: ExitDecision,
        summary: CycleSummary,
    ) -> None:
        pnl_text = f"{decision.pnl * 100:.2f}%" if decision.pnl is not None else "unknown"
        self.logger.warning(f"Closing position {tracked.id} - Reason: {decision.reason}, PnL: {pnl_text}")

        try:
            result = await self.executor.close(tracked.id)
        except Exception as e:
            self.logger.error(f"Failed to close position {tracked.id}: {e}")
            return

        if result is None:
            self.logger.error(f"Failed to close position {tracked.id}, keeping it tracked")
            return

        # Untracked and saved before recording, the position no longer exists on chain
        del self.positions[tracked.id]
        summary.closed.append(tracked.id)
        try:
            self.after_close(tracked, decision)
        except Exception as e:
            self.logger.error(f"Post-close handling failed for position {tracked.id}: {e}")
        self.save_state()

        position_record = on_chain.raw if on_chain is not None and on_chain.raw else {"id": tracked.id, **tracked.to_dict()}
        try:
            self.trade_history.record(
                "close",
                position_record,
                result,
                {"reason": decision.reason, "pnl": decision.pnl, "holdTimeHours": tracked.hold_hours()},
            )
            self.logger.log_trade(
                tracked.id, "close", [asset.to_order() for asset in tracked.assets], decision.reason or "closed"
            )
        except Exception as e:
            self.logger.error(f"Failed to record close of position {tracked.id}: {e}")

    async def _open_new_positions(self, snapshot: MarketSnapshot, summary: CycleSummary) -> None:
        opportunities = self.find_opportunities(snapshot)
        if not opportunities:
            self.logger.info("No opportunities found that meet criteria.")
            return

        print_table(build_opportunity_table(f"{self.get_strategy_name()} opportunities", opportunities))

        slots = self.config.max_positions - len(self.positions)
        limit = self.config.max_new_positions_per_cycle or slots
        to_take = opportunities[:min(slots, limit)]
        self.logger.info(f"Found {len(opportunities)} potential opportunities, taking top {len(to_take)}")

        sent_open = False
        for opportunity in to_take:
            if opportunity.denom in self.held_denoms():
                self.debug(f"Skipping {opportunity.denom}: opened as a leg earlier this cycle")
                continue
            if sent_open and not self.config.dry_run:
                self.logger.info(
                    f"Waiting {self.config.open_delay_seconds} seconds before opening next position..."
                )
                await asyncio.sleep(self.config.open_delay_seconds)
                await self.exchange_client.reconnect()

            sent_open = True
            try:
                await self._open(opportunity, opportunities, snapshot, summary)
            except Exception as e:
                self.logger.error(f"Failed to open position for {opportunity.denom}: {e}")
                self.blacklist.add(opportunity.denom, reason=f"open error: {e}")
                self.save_state()

    async def _open(
        self,
        opportunity: Opportunity,
        opportunities: List[Opportunity],
        snapshot: MarketSnapshot,
        summary: CycleSummary,
    ) -> None:
        assets = self.build_assets(opportunity, opportunities, snapshot)
        leverage = self.select_leverage(opportunity, snapshot)
        self.logger.info(
            f"Opening position with assets: {[asset.to_order() for asset in assets]} at {leverage}x"
        )

        result = await self.executor.open(assets, leverage, self.config.collateral)
        if result is None:
            until = self.blacklist.add(opportunity.denom, reason="open_failed")
            self.logger.error(f"Failed to open position for {opportunity.denom}, blacklisted until {until}")
            self.save_state()
            return

        position_id = result.position_id
        if not position_id and self.config.recover_position_id:
            position_id = await self._newest_untracked_position_id()
        if not position_id:
            self.logger.warning("Position opened but could not determine position ID")
            return

        tracked = TrackedPosition(
            id=str(position_id),
            created_at=now_ms(),
            assets=assets,
            leverage=format_leverage(leverage),
            entry_prices={
                asset.denom: snapshot.price(asset.denom)
                for asset in assets
                if snapshot.price(asset.denom) is not None
            },
            entry_funding_rates={
                asset.denom: snapshot.funding_rate(asset.denom)
                for asset in assets
                if snapshot.funding_rate(asset.denom) is not None
            },
            extra=self.position_extra(opportunity),
        )
        self.positions[tracked.id] = tracked.to_dict()
        self.save_state()

        self.trade_history.record(
            "open",
            {"id": tracked.id, "assets": [asset.to_order() for asset in assets]},
            result,
            {
                **opportunity.metrics,
                "score": opportunity.score,
                "direction": opportunity.direction,
                "entryPrices": tracked.entry_prices,
                "entryFundingRates": tracked.entry_funding_rates,
            },
        )
        self.logger.log_trade(tracked.id, "open", [asset.to_order() for asset in assets], "dry-run" if result.dry_run else "opened")

        self.after_open(tracked, opportunity)
        self.save_state()
        summary.opened.append(tracked.id)

    async def _newest_untracked_position_id(self) -> Optional[str]:
        self.logger.warning("Could not extract position ID from result, checking on-chain positions")
        positions = await self.exchange_client.get_positions()
        candidates = [p.id for p in positions if p.id not in self.positions and p.id.isdigit()]
        if not candidates:
            return None
        newest = max(candidates, key=int)
        self.logger.info(f"Found latest position ID: {newest}")
        return newest
