"""Prediction and insight providers, selected by ``ProviderConfig.mode``."""

import logging

from fleetiq_simulator.config.provider import ProviderConfig
from fleetiq_simulator.engine.rng import RandomSource
from fleetiq_simulator.providers.base import InsightProvider, PredictionProvider
from fleetiq_simulator.providers.chain import FallbackChain
from fleetiq_simulator.providers.fallback import RuleBasedInsightProvider, RuleBasedPredictionProvider
from fleetiq_simulator.providers.neural import NeuralPredictionProvider
from fleetiq_simulator.providers.openai_insights import OpenAIInsightProvider

logger = logging.getLogger(__name__)


def build_providers(config: ProviderConfig, rng: RandomSource) -> FallbackChain:
    """Wire the configured primary providers in front of the rule-based fallbacks.

    ===========  =====================  ======================
    mode         predictions            insights
    ===========  =====================  ======================
    fallback     rule-based             rule-based
    neural       neural network         rule-based
    openai       neural network         OpenAI chat model
    ===========  =====================  ======================

    ``openai`` without an API key degrades to ``neural``.
    """
    mode = config.resolved_mode
    prediction_fallback = RuleBasedPredictionProvider(rng)
    insight_fallback = RuleBasedInsightProvider()

    predictions: PredictionProvider = prediction_fallback
    insights: InsightProvider = insight_fallback

    if mode in ("neural", "openai"):
        predictions = NeuralPredictionProvider(seed=config.model_seed)
    if mode == "openai":
        if config.openai_api_key:
            insights = OpenAIInsightProvider(config)
        else:
            logger.warning("Provider mode 'openai' requested without OPENAI_API_KEY; insights use fallback")

    logger.info("Providers: predictions=%s insights=%s", predictions.name, insights.name)
    return FallbackChain(
        predictions=predictions,
        prediction_fallback=prediction_fallback,
        insights=insights,
        insight_fallback=insight_fallback,
        timeout_s=config.timeout_s,
    )


__all__ = [
    "build_providers",
    "FallbackChain",
    "PredictionProvider",
    "InsightProvider",
    "RuleBasedPredictionProvider",
    "RuleBasedInsightProvider",
    "NeuralPredictionProvider",
    "OpenAIInsightProvider",
]
