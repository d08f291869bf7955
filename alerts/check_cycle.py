"""One collect → recommend → format → dispatch pass."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from alerts.dedup import alert_identity
from alerts.formatter import DEFAULT_MAX_LISTED, format_alert_message
from models.recommendation import Recommendation

logger = logging.getLogger("kubedeck.alerts.cycle")


@dataclass
class CycleResult:
    recommendation: Optional[Recommendation] = None
    flagged: int = 0
    announced: list = field(default_factory=list)   # identities included in the message
    message: Optional[str] = None
    deliveries: dict = field(default_factory=dict)  # chat_id -> delivered
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def dispatched(self):
        return self.message is not None

    def to_dict(self):
        return {
            "recommendation": self.recommendation.to_dict() if self.recommendation else None,
            "flagged": self.flagged,
            "announced": list(self.announced),
            "dispatched": self.dispatched,
            "deliveries": {str(k): v for k, v in self.deliveries.items()},
            "finished_at": self.finished_at.isoformat(),
        }


class CheckCycle:
    """Runs a single resource check.

    Collector and recommendation engine errors propagate to the caller (the
    scheduler logs them and waits for the next tick). Delivery failures are
    handled per chat by the channel.
    """

    def __init__(self, settings, collector, recommender, channel, tracker=None,
                 deduplicate=True, max_listed=DEFAULT_MAX_LISTED):
        self.settings = settings
        self.collector = collector
        self.recommender = recommender
        self.channel = channel
        self.tracker = tracker
        self.deduplicate = deduplicate and tracker is not None
        self.max_listed = max_listed

    def analyze(self) -> Recommendation:
        """Collect usage and ask the engine for a recommendation."""
        usage = self.collector.collect()
        logger.debug(f"Collected usage for {sum(len(v) for v in usage.values())} workloads "
                     f"in {len(usage)} namespaces")
        return self.recommender.recommend(usage, self.settings.get_response_style())

    def _announceable(self, recommendation):
        """Flagged workloads that should go out now, grouped by namespace."""
        selected = {}
        announced = []
        for namespace, item in recommendation.iter_flagged():
            identity = alert_identity(namespace, item.name)
            if self.deduplicate and not self.tracker.is_due(identity):
                continue
            selected.setdefault(namespace, []).append(item)
            announced.append(identity)
        return selected, announced

    def run(self) -> CycleResult:
        recommendation = self.analyze()
        result = CycleResult(recommendation=recommendation, flagged=recommendation.flagged_count)

        if result.flagged == 0:
            logger.info("No problematic workloads found")
            return result

        selected, result.announced = self._announceable(recommendation)
        if not selected:
            logger.info(f"{result.flagged} flagged workloads, all announced within the dedup window")
            return result

        result.message = format_alert_message(selected, max_listed=self.max_listed)
        result.deliveries = self.channel.dispatch(result.message)

        delivered = sum(1 for ok in result.deliveries.values() if ok)
        if self.deduplicate:
            if delivered:
                self.tracker.record(result.announced)
            else:
                logger.warning("Alert summary reached no chat; workloads stay due for the next cycle")
        logger.info(f"Alert summary for {len(result.announced)} workloads delivered to "
                    f"{delivered}/{len(result.deliveries)} chats")
        return result
