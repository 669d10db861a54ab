"""Service layer exports for the MFlix resources and the embedding provider."""

from .comment_service import CommentService
from .embedded_movie_service import EmbeddedMovieService
from .embedding_service import EmbeddingService
from .movie_service import MovieService
from .resource_service import ResourceService
from .theater_service import TheaterService
