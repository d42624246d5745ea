"""
Integration tests for the catalog repositories and ListShowsUseCase

Test Coverage:
1. Movie cache: create, duplicate create reuses the stored row
2. Shows: upcoming filter + order, window query, latest created, new-show job outbox
3. ListShowsUseCase: distinct upcoming movies, schedule grouped by date
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.platform.exception.exceptions import NotFoundError
from src.platform.scheduler.scheduled_job import JobKind, JobRequest
from src.platform.types.utc_datetime import utc_now
from src.service.catalog.app.query.list_shows_use_case import ListShowsUseCase
from src.service.catalog.domain.entity.show_entity import Show
from test.shared.utils import make_movie


@pytest.mark.integration
class TestMovieRepo:
    @pytest.mark.asyncio
    async def test_create_and_get(self, movie_repo):
        await movie_repo.create(movie=make_movie(550, 'Fight Club'))

        movie = await movie_repo.get_by_id(movie_id=550)

        assert movie.title == 'Fight Club'
        assert movie.genres == [{'id': 18, 'name': 'Drama'}]
        assert movie.casts == [{'name': 'Brad Pitt'}]
        assert movie.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_create_keeps_first_snapshot(self, movie_repo):
        await movie_repo.create(movie=make_movie(550, 'Fight Club'))

        again = await movie_repo.create(movie=make_movie(550, 'Renamed'))

        assert again.title == 'Fight Club'

    @pytest.mark.asyncio
    async def test_get_by_ids(self, movie_repo):
        await movie_repo.create(movie=make_movie(1, 'One'))
        await movie_repo.create(movie=make_movie(2, 'Two'))

        movies = await movie_repo.get_by_ids(movie_ids=[1, 2, 3])

        assert sorted(movies) == [1, 2]


@pytest.mark.integration
class TestShowRepo:
    @pytest.mark.asyncio
    async def test_list_upcoming_excludes_past_and_orders_by_time(self, seed_movie, seed_show, show_repo):
        # Given
        await seed_movie()
        now = utc_now()
        later = await seed_show(show_date_time=now + timedelta(days=2))
        sooner = await seed_show(show_date_time=now + timedelta(hours=3))
        await seed_show(show_date_time=now - timedelta(hours=1))

        # When
        shows = await show_repo.list_upcoming(now=now)

        # Then
        assert [s.id for s in shows] == [sooner.id, later.id]
        assert shows[0].show_price == Decimal('10.00')

    @pytest.mark.asyncio
    async def test_list_between_is_half_open(self, seed_movie, seed_show, show_repo):
        await seed_movie()
        start = utc_now() + timedelta(hours=1)
        inside = await seed_show(show_date_time=start)
        await seed_show(show_date_time=start + timedelta(hours=8))

        shows = await show_repo.list_between(start=start, end=start + timedelta(hours=8))

        assert [s.id for s in shows] == [inside.id]

    @pytest.mark.asyncio
    async def test_create_many_writes_jobs_in_same_transaction(self, seed_movie, show_repo, job_queue):
        await seed_movie()
        show = Show.create(movie_id=550, show_date_time=utc_now() + timedelta(days=1), show_price=Decimal('9'))

        await show_repo.create_many(
            shows=[show],
            jobs=[JobRequest(kind=JobKind.NEW_SHOW, key=str(show.id), payload={'movie_title': 'Fight Club'})],
        )

        assert await show_repo.get_by_id(show_id=show.id) is not None
        job = await job_queue.get(kind=JobKind.NEW_SHOW, key=str(show.id))
        assert job.payload['movie_title'] == 'Fight Club'

    @pytest.mark.asyncio
    async def test_latest_created(self, seed_movie, seed_show, show_repo):
        await seed_movie(550, 'Fight Club')
        await seed_movie(680, 'Pulp Fiction')
        await seed_show(movie_id=550)
        latest = await seed_show(movie_id=680)

        assert (await show_repo.get_latest_created()).id == latest.id


@pytest.mark.integration
class TestListShowsUseCase:
    @pytest.mark.asyncio
    async def test_distinct_upcoming_movies(self, seed_movie, seed_show, movie_repo, show_repo):
        # Given: two shows of 550, one of 680, one past show of 13
        await seed_movie(550, 'Fight Club')
        await seed_movie(680, 'Pulp Fiction')
        await seed_movie(13, 'Forrest Gump')
        now = utc_now()
        await seed_show(movie_id=680, show_date_time=now + timedelta(days=3))
        await seed_show(movie_id=550, show_date_time=now + timedelta(days=1))
        await seed_show(movie_id=550, show_date_time=now + timedelta(days=2))
        await seed_show(movie_id=13, show_date_time=now - timedelta(days=1))

        # When
        movies = await ListShowsUseCase(movie_repo=movie_repo, show_repo=show_repo).list_upcoming_movies()

        # Then
        assert [m.id for m in movies] == [550, 680]

    @pytest.mark.asyncio
    async def test_schedule_grouped_by_date(self, seed_movie, seed_show, movie_repo, show_repo):
        await seed_movie()
        base = (utc_now() + timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)
        morning = await seed_show(show_date_time=base)
        evening = await seed_show(show_date_time=base + timedelta(hours=8))
        next_day = await seed_show(show_date_time=base + timedelta(days=1))

        movie, date_time = await ListShowsUseCase(
            movie_repo=movie_repo, show_repo=show_repo
        ).get_show_schedule(movie_id=550)

        assert movie.id == 550
        assert date_time == {
            base.date().isoformat(): [
                {'time': morning.show_date_time, 'showId': str(morning.id)},
                {'time': evening.show_date_time, 'showId': str(evening.id)},
            ],
            (base + timedelta(days=1)).date().isoformat(): [
                {'time': next_day.show_date_time, 'showId': str(next_day.id)},
            ],
        }

    @pytest.mark.asyncio
    async def test_schedule_of_unknown_movie(self, movie_repo, show_repo):
        with pytest.raises(NotFoundError, match='Movie not found'):
            await ListShowsUseCase(movie_repo=movie_repo, show_repo=show_repo).get_show_schedule(
                movie_id=999
            )
