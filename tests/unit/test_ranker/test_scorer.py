"""Unit tests for the content scorer."""

import math
from datetime import timedelta

import pytest

from feedrank.ranker.models import DistributionStat, RankingConfig
from feedrank.ranker.scorer import (
    ContentScorer,
    diversity_score_for_percentage,
    engagement_rate,
    engagement_score,
    hours_since,
    recency_score,
)
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_NOW


class TestRecencyScore:
    """Tests for the piecewise recency decay."""

    def test_just_published(self) -> None:
        """Fresh content gets the maximum score."""
        assert recency_score(0.0) == 10.0

    def test_first_day_is_flat(self) -> None:
        """Content up to 24 hours old keeps the maximum score."""
        assert recency_score(24.0) == 10.0

    def test_one_week(self) -> None:
        """At 168 hours the week curve gives 10 * e^(-144/168)."""
        assert recency_score(168.0) == pytest.approx(10 * math.exp(-144 / 168))
        assert recency_score(168.0) == pytest.approx(4.24, abs=0.01)

    def test_stale(self) -> None:
        """Beyond a week the lower curve applies."""
        assert recency_score(1000.0) == pytest.approx(3 * math.exp(-832 / 720))
        assert recency_score(1000.0) == pytest.approx(0.94, abs=0.01)

    def test_unpublished(self) -> None:
        """Items without a publish date score zero."""
        assert recency_score(None) == 0.0

    def test_fractional_hours(self) -> None:
        """Partial hours count, so 30 minutes past the first day decays."""
        assert recency_score(24.5) < 10.0

    def test_monotonic(self) -> None:
        """Older content never scores higher than newer content."""
        values = [recency_score(h) for h in (0, 12, 48, 100, 168, 200, 500, 2000)]
        assert values == sorted(values, reverse=True)


class TestEngagementScore:
    """Tests for the engagement blend."""

    def test_no_engagement(self) -> None:
        """No views or likes scores zero."""
        assert engagement_score(0, 0, 5.0) == 0.0

    def test_known_value(self) -> None:
        """100 views and 10 likes over 10 hours."""
        # velocities 10 and 1, rate 10 -> raw 4 + 4 + 2 = 10
        assert engagement_score(100, 10, 10.0) == pytest.approx(2 * math.log(11))

    def test_minimum_one_hour(self) -> None:
        """Brand new content is normalized over at least one hour."""
        assert engagement_score(10, 0, 0.1) == engagement_score(10, 0, 1.0)

    def test_unpublished_uses_one_hour(self) -> None:
        """A missing publish date is normalized over one hour."""
        assert engagement_score(10, 1, None) == engagement_score(10, 1, 1.0)

    def test_capped(self) -> None:
        """Viral content is capped at 10."""
        assert engagement_score(10_000_000, 1_000_000, 1.0) == 10.0

    def test_engagement_rate(self) -> None:
        """Likes per hundred views, zero without views."""
        assert engagement_rate(200, 10) == pytest.approx(5.0)
        assert engagement_rate(0, 10) == 0.0


class TestDiversityScoreForPercentage:
    """Tests for the diversity band mapping."""

    @pytest.mark.parametrize(
        ("percentage", "expected"),
        [
            (100.0, 1.0),
            (61.0, 1.0),
            (60.0, 1.0),
            (59.0, 2.5),
            (41.0, 2.5),
            (40.0, 4.0),
            (25.0, 4.0),
            (20.0, 5.5),
            (15.0, 7.0),
            (10.0, 7.0),
            (5.0, 7.0),
            (4.0, 6.5),
            (2.0, 6.5),
            (1.0, 5.5),
        ],
    )
    def test_bands(self, percentage: float, expected: float) -> None:
        """Each corpus share maps to its band."""
        assert diversity_score_for_percentage(percentage) == expected


class TestHoursSince:
    """Tests for the elapsed-hours helper."""

    def test_naive_timestamp_is_utc(self) -> None:
        """Naive timestamps are interpreted as UTC."""
        naive = (FIXED_NOW - timedelta(hours=3)).replace(tzinfo=None)
        assert hours_since(naive, FIXED_NOW) == pytest.approx(3.0)

    def test_none(self) -> None:
        """Unpublished items have no age."""
        assert hours_since(None, FIXED_NOW) is None


class TestContentScorer:
    """Tests for ContentScorer."""

    def test_authority_official(self) -> None:
        """laravel.com items get authority 10."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://laravel.com/docs/11.x")
        assert scorer.breakdown(item).source_authority.score == 10.0

    def test_authority_unknown(self) -> None:
        """Unlisted domains get authority 3."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://randomsite.xyz/post")
        assert scorer.breakdown(item).source_authority.score == 3.0

    def test_authority_blog_pattern(self) -> None:
        """Blog subdomains match the blog.* rule."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://blog.example.com/post")
        assert scorer.breakdown(item).source_authority.score == 5.0

    def test_authority_missing_url(self) -> None:
        """Items without a source URL get the default authority."""
        scorer = ContentScorer(now=FIXED_NOW)
        assert scorer.breakdown(make_item(source_url=None)).source_authority.score == 3.0

    def test_diversity_neutral_without_snapshot(self) -> None:
        """Without a distribution every domain scores neutral."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://laravel.com/a")
        assert scorer.breakdown(item).source_diversity.score == 5.0

    def test_diversity_from_snapshot(self) -> None:
        """A dominant domain is penalized."""
        scorer = ContentScorer(
            distribution={"laravel.com": DistributionStat(count=70, percentage=70.0)},
            now=FIXED_NOW,
        )
        item = make_item(source_url="https://www.laravel.com/a")
        assert scorer.breakdown(item).source_diversity.score == 1.0

    def test_diversity_unseen_domain_neutral(self) -> None:
        """Domains absent from the snapshot score neutral."""
        scorer = ContentScorer(
            distribution={"laravel.com": DistributionStat(count=70, percentage=70.0)},
            now=FIXED_NOW,
        )
        item = make_item(source_url="https://dev.to/a")
        assert scorer.breakdown(item).source_diversity.score == 5.0

    def test_diversity_unknown_domain_neutral(self) -> None:
        """Unparsable sources score neutral even if 'unknown' is in the snapshot."""
        scorer = ContentScorer(
            distribution={"unknown": DistributionStat(count=90, percentage=90.0)},
            now=FIXED_NOW,
        )
        item = make_item(source_url="not a url")
        assert scorer.breakdown(item).source_diversity.score == 5.0

    def test_total_score(self) -> None:
        """Fresh official item without engagement or snapshot scores 7.0."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://laravel.com/a", hours_old=0.0)
        # 10 * 0.35 + 10 * 0.30 + 0 * 0.25 + 5 * 0.10
        assert scorer.score(item) == pytest.approx(7.0)

    def test_score_bounds(self) -> None:
        """Total scores stay within [0, 10]."""
        scorer = ContentScorer(
            distribution={"laravel.com": DistributionStat(count=1, percentage=3.0)},
            now=FIXED_NOW,
        )
        items = [
            make_item(source_url="https://laravel.com/a", hours_old=0.0, views=10**9, likes=10**8),
            make_item(source_url="https://randomsite.xyz/b", hours_old=10_000.0),
            make_item(source_url=None, hours_old=None),
        ]
        for item in items:
            assert 0.0 <= scorer.score(item) <= 10.0

    def test_pure(self) -> None:
        """Same inputs produce the same score."""
        item = make_item(source_url="https://dev.to/a", hours_old=30.0, views=50, likes=5)
        first = ContentScorer(now=FIXED_NOW).score(item)
        second = ContentScorer(now=FIXED_NOW).score(item)
        assert first == second

    def test_breakdown_matches_score(self) -> None:
        """The breakdown total equals the score."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://freek.dev/a", hours_old=50.0, views=40, likes=4)
        breakdown = scorer.breakdown(item)

        assert breakdown.total_score == pytest.approx(scorer.score(item))
        assert breakdown.domain == "freek.dev"
        assert breakdown.engagement_rate == 10.0

    def test_breakdown_to_dict(self) -> None:
        """Serialized breakdown carries every component."""
        scorer = ContentScorer(now=FIXED_NOW)
        data = scorer.breakdown(make_item(hours_old=2.0)).to_dict()

        assert set(data) == {
            "source_authority",
            "recency",
            "engagement",
            "source_diversity",
            "total_score",
        }
        assert data["recency"]["hours_old"] == pytest.approx(2.0)
        assert data["source_authority"]["weight"] == 0.35

    def test_score_items(self) -> None:
        """score_items maps every id to its score."""
        scorer = ContentScorer(now=FIXED_NOW)
        items = [make_item(item_id="a"), make_item(item_id="b", hours_old=500.0)]
        scores = scorer.score_items(items)

        assert set(scores) == {"a", "b"}
        assert scores["a"] > scores["b"]

    def test_effective_score_prefers_stored(self) -> None:
        """A stored ranking score is used as-is."""
        scorer = ContentScorer(now=FIXED_NOW)
        assert scorer.effective_score(make_item(ranking_score=1.25)) == 1.25

    def test_effective_score_keeps_stored_zero(self) -> None:
        """A stored 0.0 counts as a score and is not recomputed."""
        scorer = ContentScorer(now=FIXED_NOW)
        item = make_item(source_url="https://laravel.com/a", ranking_score=0.0)

        assert scorer.effective_score(item) == 0.0
        assert scorer.effective_score(item.model_copy(update={"ranking_score": None})) > 0.0

    def test_custom_config(self) -> None:
        """A versioned config changes weights and authority."""
        config = RankingConfig.model_validate(
            {
                "version": "2.0.0",
                "weights": {
                    "source_authority": 1.0,
                    "recency": 0.0,
                    "engagement": 0.0,
                    "source_diversity": 0.0,
                },
                "authority": [
                    {"pattern": "example.com", "score": 9},
                    {"pattern": "default", "score": 1},
                ],
            }
        )
        scorer = ContentScorer(now=FIXED_NOW, config=config)

        assert scorer.score(make_item(source_url="https://example.com/a")) == pytest.approx(9.0)
        assert scorer.score(make_item(source_url="https://laravel.com/a")) == pytest.approx(1.0)
