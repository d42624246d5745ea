#!/usr/bin/env python3
"""
Database Seed Script
Populate demo data for local runs

Features:
1. Create Users - an admin and two customers (mirrors of identity-provider users)
2. Cache Movies - movie snapshots, no TMDB call needed
3. Create Shows - two show times per movie for the next three days
4. Print bearer tokens for the seeded users

Notes:
- Shows are inserted without new-show alerts
- Tokens are signed with SECRET_KEY, the same key the API verifies with
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import Database, create_db_and_tables, dispose_engine
from src.platform.scheduler.job_queue_impl import JobQueueImpl
from src.service.catalog.domain.entity.movie_entity import Movie
from src.service.catalog.domain.entity.show_entity import Show
from src.service.catalog.driven_adapter.repo.movie_repo_impl import MovieRepoImpl
from src.service.catalog.driven_adapter.repo.show_repo_impl import ShowRepoImpl
from src.service.identity.domain.entity.user_entity import User
from src.service.identity.driven_adapter.repo.user_repo_impl import UserRepoImpl
from src.service.identity.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


@dataclass
class UserConfig:
    """User seed configuration"""
    id: str
    email: str
    name: str
    role: Optional[str] = None


TEST_USERS = [
    UserConfig(id='user_admin', email='admin@showza.local', name='ShowZa Admin', role=settings.ADMIN_ROLE),
    UserConfig(id='user_ada', email='ada@showza.local', name='Ada Lovelace'),
    UserConfig(id='user_grace', email='grace@showza.local', name='Grace Hopper'),
]

TEST_MOVIES = [
    Movie(
        id=550,
        title='Fight Club',
        overview='An insomniac office worker and a soap maker form an underground fight club.',
        poster_path='/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg',
        genres=[{'id': 18, 'name': 'Drama'}],
        casts=[{'name': 'Brad Pitt'}, {'name': 'Edward Norton'}],
        release_date='1999-10-15',
        original_language='en',
        vote_average=8.4,
        runtime=139,
    ),
    Movie(
        id=680,
        title='Pulp Fiction',
        overview='The lives of two mob hitmen, a boxer and a pair of diner bandits intertwine.',
        poster_path='/d5iIlFn5s0ImszYzBPb8JPIfbXD.jpg',
        genres=[{'id': 53, 'name': 'Thriller'}, {'id': 80, 'name': 'Crime'}],
        casts=[{'name': 'John Travolta'}, {'name': 'Uma Thurman'}],
        release_date='1994-09-10',
        original_language='en',
        vote_average=8.5,
        runtime=154,
    ),
]

SHOW_TIMES = (time(14, 30), time(19, 0))
SHOW_DAYS = 3
SHOW_PRICE = Decimal('12.00')


def _build_shows(movie_id: int) -> list[Show]:
    tz = ZoneInfo(settings.DISPLAY_TIMEZONE)
    today = datetime.now(tz).date()
    return [
        Show.create(
            movie_id=movie_id,
            show_date_time=datetime.combine(today + timedelta(days=day), show_time, tzinfo=tz),
            show_price=SHOW_PRICE,
        )
        for day in range(1, SHOW_DAYS + 1)
        for show_time in SHOW_TIMES
    ]


async def create_users(user_repo: UserRepoImpl) -> None:
    print(f'👥 Creating {len(TEST_USERS)} users...')
    for config in TEST_USERS:
        user = await user_repo.upsert(user=User(id=config.id, name=config.name, email=config.email))
        print(f'   ✅ Created user: ID={user.id}, Email={user.email}')


async def create_movies_and_shows(movie_repo: MovieRepoImpl, show_repo: ShowRepoImpl) -> None:
    print(f'🎬 Caching {len(TEST_MOVIES)} movies with shows...')
    for movie in TEST_MOVIES:
        await movie_repo.create(movie=movie)
        shows = _build_shows(movie.id)
        await show_repo.create_many(shows=shows)
        print(f'   ✅ {movie.title}: {len(shows)} shows at {SHOW_PRICE}')


def print_tokens() -> None:
    jwt_auth = JwtAuth()
    print('🔑 Bearer tokens:')
    for config in TEST_USERS:
        token = jwt_auth.create_jwt_token(user_id=config.id, role=config.role, email=config.email)
        print(f'   {config.id}: {token}')


async def main():
    print('🌱 Starting data seeding...')
    print('=' * 50)

    database = Database()
    try:
        await create_db_and_tables()
        await create_users(UserRepoImpl(session_factory=database.session))
        await create_movies_and_shows(
            MovieRepoImpl(session_factory=database.session),
            ShowRepoImpl(
                session_factory=database.session,
                job_queue=JobQueueImpl(session_factory=database.session),
            ),
        )
        print()
        print_tokens()

        print('=' * 50)
        print('🌱 Data seeding completed!')

    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        exit(1)
    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())
