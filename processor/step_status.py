"""Tweets whether today's Fitbit step goal was met."""
import logging

from bs4 import BeautifulSoup

from gateway.errors import GatewayError, MalformedResponseError
from gateway.fitbit import FitbitClient
from gateway.twitter import TwitterClient
from processor.models import StepStatusResult

logger = logging.getLogger(__name__)


class StepStatus:
    """Reads today's step count and posts the matching status message."""

    def __init__(
        self,
        fitbit: FitbitClient,
        twitter: TwitterClient,
        benchmark: int,
        goal_met_message: str,
        goal_not_met_message: str
    ):
        self.fitbit = fitbit
        self.twitter = twitter
        self.benchmark = benchmark
        self.goal_met_message = goal_met_message
        self.goal_not_met_message = goal_not_met_message

    def run(self) -> StepStatusResult:
        """
        Compare today's steps to the benchmark and tweet the result.

        Returns:
            StepStatusResult with the step count and the message posted
        """
        steps = self.get_steps()
        logger.info(f"Fitbit says that you have walked {steps} steps")

        goal_met = steps >= self.benchmark
        message = self.goal_met_message if goal_met else self.goal_not_met_message

        try:
            self.twitter.update_status(message)
        except GatewayError as e:
            logger.error(f"Something went wrong trying to update your Twitter status: {e}")
            raise

        logger.info(f"Successfully tweeted: {message}")
        return StepStatusResult(
            steps=steps,
            benchmark=self.benchmark,
            goal_met=goal_met,
            message=message
        )

    def get_steps(self) -> int:
        """
        Fetch today's step count.

        Returns:
            Number of steps

        Raises:
            MalformedResponseError: If the time series holds no integer value
        """
        soup = BeautifulSoup(self.fitbit.get_steps_today(), 'xml')

        # The series wraps each day in <value>, the count is the innermost one
        values = [
            element for element in soup.find_all('value')
            if element.find('value') is None
        ]
        if not values:
            raise MalformedResponseError(
                "No step value in Fitbit time series",
                choreo=FitbitClient.GET_TIME_SERIES_BY_PERIOD
            )

        raw = values[0].get_text(strip=True)
        try:
            return int(raw)
        except ValueError:
            raise MalformedResponseError(
                f"Step value is not an integer: {raw!r}",
                choreo=FitbitClient.GET_TIME_SERIES_BY_PERIOD
            )
