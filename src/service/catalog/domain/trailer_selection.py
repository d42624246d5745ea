from typing import Any, Optional, Sequence


VIDEO_TYPE_PRIORITY = (
    'Trailer',
    'Teaser',
    'Clip',
    'Behind the Scenes',
    'Featurette',
    'Opening Credits',
    'Bloopers',
)
TRAILER_COUNT = 5
FEATURED_LANGUAGE = 'hi'


def pick_best_video(videos: Sequence[dict[str, Any]]) -> tuple[Optional[dict[str, Any]], Optional[str]]:
    """
    Choose the YouTube video to feature for a movie.

    Highest VIDEO_TYPE_PRIORITY type wins; otherwise the first YouTube video
    of any type. Returns (video, video_type) or (None, None).
    """
    youtube = [v for v in videos if v.get('site') == 'YouTube']
    for video_type in VIDEO_TYPE_PRIORITY:
        for video in youtube:
            if video.get('type') == video_type:
                return video, video_type
    if youtube:
        return youtube[0], youtube[0].get('type') or 'Video'
    return None, None


def is_future_release(movie: dict[str, Any], *, today: str) -> bool:
    # TMDB dates are ISO strings, so lexical order is chronological
    return (movie.get('release_date') or '') > today


def to_trailer(movie: dict[str, Any], videos: Sequence[dict[str, Any]]) -> dict[str, Any]:
    video, video_type = pick_best_video(videos)
    key = video.get('key') if video else None
    return {
        'movieId': movie.get('id'),
        'title': movie.get('title'),
        'image': movie.get('backdrop_path'),
        'videoUrl': f'https://www.youtube.com/watch?v={key}' if key else None,
        'key': key,
        'releaseDate': movie.get('release_date'),
        'voteAverage': movie.get('vote_average'),
        'videoType': video_type,
    }
