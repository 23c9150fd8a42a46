"""Analysis orchestration.

Website analysis:
    admit -> resolve model -> real or simulated -> assemble -> record cost

AEO analysis:
    admit -> (crawl, optional) -> citation check -> aggregate -> assemble

Real mode is reserved for paid plans and privileged identities. A failed
crawl in the website flow degrades to a simulated result instead of failing
the request; a failed citation check in the AEO flow always propagates.
"""

import random
from uuid import uuid4

import structlog

from api.config import Settings
from worker.analysis.models import AEOAnalysis, Analysis, CrawlSummary
from worker.analysis.simulation import Simulator
from worker.crawler.client import CrawlClient, RemoteCrawlClient
from worker.crawler.models import CrawlData
from worker.fixes.recommendations import compute_recommendations
from worker.functions import FunctionInvoker
from worker.observation.aggregator import CitationAggregator
from worker.observation.client import CitationClient, RemoteCitationClient
from worker.observation.models import (
    ContentAnalysis,
    PromptSpec,
    ProviderName,
    active_providers,
)
from worker.scoring.insights import (
    generate_insights_from_crawl,
    generate_issues_from_crawl,
    generate_simulated_insights,
)
from worker.scoring.metrics import (
    calculate_overall_score,
    calculate_predicted_rank,
    category_from_score,
    compute_metrics,
)
from worker.usage.costs import (
    CostInfo,
    ModelConfig,
    aeo_costs,
    real_analysis_costs,
    resolve_model,
    simulated_aeo_costs,
    simulated_costs,
)
from worker.usage.models import REAL_ANALYSIS_PLANS
from worker.usage.policy import Identity, UsagePolicy

logger = structlog.get_logger(__name__)

DEFAULT_PROVIDERS = [ProviderName.OPENAI, ProviderName.ANTHROPIC, ProviderName.PERPLEXITY]


class AnalysisEngine:
    """Entry point for website and AEO analyses."""

    def __init__(
        self,
        crawl_client: CrawlClient,
        citation_client: CitationClient,
        policy: UsagePolicy,
        simulator: Simulator | None = None,
        aggregator: CitationAggregator | None = None,
        default_model_key: str = "gpt-4",
    ):
        self.crawl_client = crawl_client
        self.citation_client = citation_client
        self.policy = policy
        self.simulator = simulator or Simulator()
        self.aggregator = aggregator or CitationAggregator()
        self.default_model_key = default_model_key

    def should_use_real_analysis(self, identity: Identity) -> bool:
        return identity.plan in REAL_ANALYSIS_PLANS or self.policy.is_privileged(identity)

    async def analyze_website(
        self,
        website: str,
        keywords: list[str],
        identity: Identity,
        model_key: str | None = None,
    ) -> Analysis:
        """Score a website. Raises QuotaExceededError or RateLimitError when refused."""
        await self.policy.admit(identity)

        model = resolve_model(model_key or self.default_model_key)
        analysis_id = str(uuid4())
        real = self.should_use_real_analysis(identity)

        logger.info(
            "analysis_started",
            analysis_id=analysis_id,
            user_id=identity.user_id,
            website=website,
            mode="real" if real else "simulated",
            model=model.key,
        )

        if real:
            try:
                crawl = await self.crawl_client.crawl(website, keywords)
            except Exception as e:
                logger.warning(
                    "crawl_failed_falling_back",
                    analysis_id=analysis_id,
                    website=website,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                analysis = self._simulated_analysis(analysis_id, website, keywords, identity, model)
            else:
                analysis = self._real_analysis(
                    analysis_id, website, keywords, identity, model, crawl
                )
        else:
            analysis = self._simulated_analysis(analysis_id, website, keywords, identity, model)

        await self._record_cost(identity, analysis.cost_info)

        logger.info(
            "analysis_completed",
            analysis_id=analysis_id,
            score=analysis.score,
            is_simulated=analysis.is_simulated,
            recommendations=len(analysis.recommendations),
            total_cost=analysis.cost_info.total_cost,
        )
        return analysis

    def _real_analysis(
        self,
        analysis_id: str,
        website: str,
        keywords: list[str],
        identity: Identity,
        model: ModelConfig,
        crawl: CrawlData,
    ) -> Analysis:
        metrics = compute_metrics(crawl)
        score = calculate_overall_score(metrics)
        issues = generate_issues_from_crawl(crawl)

        return Analysis(
            id=analysis_id,
            user_id=identity.user_id,
            website=website,
            keywords=list(keywords),
            model=model.key,
            score=score,
            metrics=metrics,
            insights=generate_insights_from_crawl(crawl, metrics),
            predicted_rank=calculate_predicted_rank(score),
            category=category_from_score(score),
            recommendations=compute_recommendations(crawl, metrics),
            is_simulated=False,
            cost_info=real_analysis_costs(keywords, model),
            crawl_summary=CrawlSummary.from_crawl(crawl, issues),
        )

    def _simulated_analysis(
        self,
        analysis_id: str,
        website: str,
        keywords: list[str],
        identity: Identity,
        model: ModelConfig,
    ) -> Analysis:
        metrics, score = self.simulator.metrics()

        return Analysis(
            id=analysis_id,
            user_id=identity.user_id,
            website=website,
            keywords=list(keywords),
            model=model.key,
            score=score,
            metrics=metrics,
            insights=generate_simulated_insights(website, score),
            predicted_rank=calculate_predicted_rank(score),
            category=category_from_score(score),
            recommendations=self.simulator.recommendations(),
            is_simulated=True,
            cost_info=simulated_costs(),
        )

    async def analyze_aeo(
        self,
        website: str,
        prompts: list[PromptSpec],
        identity: Identity,
        brand_name: str | None = None,
        providers: list[ProviderName] | None = None,
    ) -> AEOAnalysis:
        """Check how often AI providers cite a website for the given prompts.

        Raises CitationCheckError when the citation service fails in real mode.
        """
        await self.policy.admit(identity)

        providers = active_providers(providers or DEFAULT_PROVIDERS)
        analysis_id = f"aeo-{uuid4()}"
        real = self.should_use_real_analysis(identity)

        logger.info(
            "aeo_analysis_started",
            analysis_id=analysis_id,
            user_id=identity.user_id,
            website=website,
            prompts=len(prompts),
            providers=[p.value for p in providers],
            mode="real" if real else "simulated",
        )

        crawl: CrawlData | None = None
        if real:
            try:
                crawl = await self.crawl_client.crawl(website, [])
            except Exception as e:
                logger.warning(
                    "aeo_crawl_failed_continuing",
                    analysis_id=analysis_id,
                    website=website,
                    error=str(e),
                    error_type=type(e).__name__,
                )

            check = await self.citation_client.check(prompts, website, brand_name, providers)
            results = check.results
            if crawl is not None:
                content = ContentAnalysis.from_crawl(crawl)
            else:
                content = ContentAnalysis.defaults()
            cost_info = aeo_costs(check.total_cost)
        else:
            results = self.simulator.citation_results(prompts, website, brand_name, providers)
            content = self.simulator.content_analysis()
            cost_info = simulated_aeo_costs()

        aggregate = self.aggregator.aggregate(results, content, prompts)

        analysis = AEOAnalysis(
            id=analysis_id,
            user_id=identity.user_id,
            website=website,
            brand_name=brand_name,
            prompts=list(prompts),
            citation_results=list(results),
            overall_citation_rate=aggregate.overall_citation_rate,
            providers_used=providers,
            content_analysis=content,
            recommendations=aggregate.recommendations,
            is_simulated=not real,
            cost_info=cost_info,
            crawl_summary=CrawlSummary.from_crawl(crawl) if crawl is not None else None,
        )

        await self._record_cost(identity, cost_info)

        logger.info(
            "aeo_analysis_completed",
            analysis_id=analysis_id,
            citation_rate=round(aggregate.overall_citation_rate, 1),
            results=len(results),
            is_simulated=analysis.is_simulated,
            total_cost=cost_info.total_cost,
        )
        return analysis

    async def _record_cost(self, identity: Identity, cost_info: CostInfo) -> None:
        if not cost_info.billable:
            return
        tokens = cost_info.tokens_used
        await self.policy.record_cost(
            identity.user_id,
            cost_info.total_cost,
            tokens=tokens.input + tokens.output + tokens.embeddings,
        )


def build_engine(
    settings: Settings,
    policy: UsagePolicy | None = None,
    rng: random.Random | None = None,
) -> AnalysisEngine:
    """Wire an engine to the remote crawl and citation functions."""
    invoker = FunctionInvoker.from_settings(settings)
    return AnalysisEngine(
        crawl_client=RemoteCrawlClient(invoker, settings.crawl_function_name),
        citation_client=RemoteCitationClient(invoker, settings.citation_function_name),
        policy=policy or UsagePolicy.from_settings(settings),
        simulator=Simulator(rng),
        default_model_key=settings.default_model_key,
    )
