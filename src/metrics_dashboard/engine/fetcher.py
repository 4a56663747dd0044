"""Submit query batches to CloudWatch GetMetricData."""

from typing import Any, Dict, List, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import FetchFailure
from ..utils.logger import get_logger
from .models import MetricQuerySpec, QueryBatch, RawSeriesResult

logger = get_logger(__name__)

# GetMetricData accepts at most 500 queries per request
MAX_QUERIES_PER_REQUEST = 500


class MetricFetcher:
    """
    Fetches raw series for a query batch.

    Returns exactly one RawSeriesResult per requested id. Ids the source
    omitted resolve to empty results. Failures surface as one FetchFailure
    for the whole batch. No retries or caching happen here; throttling
    retries belong to the client's botocore retry configuration.
    """

    def __init__(self, cloudwatch_client: Any):
        """
        Initialize the fetcher.

        Args:
            cloudwatch_client: Boto3 CloudWatch client (or a test double)
        """
        self.cloudwatch_client = cloudwatch_client

    def fetch(self, batch: QueryBatch) -> Dict[str, RawSeriesResult]:
        """
        Fetch all series of a batch.

        Args:
            batch: Queries and shared time window

        Returns:
            Dict mapping every requested id to its raw result, in batch order.

        Raises:
            FetchFailure: If the metrics source rejects any request.
        """
        merged: Dict[str, RawSeriesResult] = {}
        logger.info(f"Fetching batch {batch.batch_id} ({len(batch.queries)} queries)")

        try:
            for chunk in self._chunks(batch.queries):
                self._fetch_chunk(batch, chunk, merged)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            logger.error(f"CloudWatch rejected batch {batch.batch_id}: {e}")
            raise FetchFailure(batch.batch_id, str(e), error_code=error_code) from e
        except BotoCoreError as e:
            logger.error(f"CloudWatch request failed for batch {batch.batch_id}: {e}")
            raise FetchFailure(batch.batch_id, str(e)) from e

        results: Dict[str, RawSeriesResult] = {}
        for query in batch.queries:
            result = merged.get(query.id)
            if result is None:
                logger.info(f"No data for {query.id} in batch {batch.batch_id}")
                result = RawSeriesResult.empty(query.id)
            elif result.status_code == "PartialData":
                # status of the last page; earlier pages are always partial
                logger.warning(f"Partial data for {query.id} in batch {batch.batch_id}")
            results[query.id] = result
        return results

    @staticmethod
    def _chunks(queries: Sequence[MetricQuerySpec]) -> List[Sequence[MetricQuerySpec]]:
        return [
            queries[i:i + MAX_QUERIES_PER_REQUEST]
            for i in range(0, len(queries), MAX_QUERIES_PER_REQUEST)
        ]

    def _fetch_chunk(
        self,
        batch: QueryBatch,
        queries: Sequence[MetricQuerySpec],
        merged: Dict[str, RawSeriesResult],
    ) -> None:
        requested = {q.id for q in queries}
        paginator = self.cloudwatch_client.get_paginator("get_metric_data")
        pages = paginator.paginate(
            MetricDataQueries=[q.to_api() for q in queries],
            StartTime=batch.window.start,
            EndTime=batch.window.end,
        )

        for page in pages:
            for message in page.get("Messages", []):
                logger.warning(
                    f"CloudWatch message for batch {batch.batch_id}: "
                    f"{message.get('Code')} {message.get('Value')}"
                )

            for item in page.get("MetricDataResults", []):
                series_id = item.get("Id")
                if series_id not in requested:
                    logger.debug(f"Ignoring unrequested result id {series_id}")
                    continue

                raw = RawSeriesResult.from_api(item)
                existing = merged.get(series_id)
                merged[series_id] = raw if existing is None else existing.merge(raw)
