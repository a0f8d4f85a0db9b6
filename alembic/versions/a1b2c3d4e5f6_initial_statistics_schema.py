"""initial statistics schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 10:00:00.000000

Hey future me - this is the whole schema in one go:
- top_artists / top_tracks: a user's ranked top 3, unique per (user, rank) and per (user, name)
- user_platforms: which streaming platform a user linked
- user_statistics: one aggregate row per user
- user_statistics_artists / user_statistics_tracks: link rows, cascading from BOTH sides

There is deliberately no CHECK on rank. The repositories park rows on negative ranks
while reshuffling the top 3, see ArtistRepository.upsert_many.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "top_artists",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "rank", name="uq_top_artists_user_rank"),
        sa.UniqueConstraint("user_id", "name", name="uq_top_artists_user_name"),
    )
    op.create_index("ix_top_artists_user_id", "top_artists", ["user_id"])

    op.create_table(
        "top_tracks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("artist_name", sa.String(length=255), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "rank", name="uq_top_tracks_user_rank"),
        sa.UniqueConstraint(
            "user_id", "name", "artist_name", name="uq_top_tracks_user_name_artist"
        ),
    )
    op.create_index("ix_top_tracks_user_id", "top_tracks", ["user_id"])

    op.create_table(
        "user_platforms",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("platform", sa.String(length=32), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "user_statistics",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False, unique=True),
        sa.Column("favorite_genre", sa.String(length=255), nullable=True),
        sa.Column("platform", sa.String(length=32), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "user_statistics_artists",
        sa.Column(
            "statistics_id",
            sa.String(length=36),
            sa.ForeignKey("user_statistics.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "artist_id",
            sa.String(length=36),
            sa.ForeignKey("top_artists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
    )
    op.create_index(
        "ix_user_statistics_artists_artist", "user_statistics_artists", ["artist_id"]
    )

    op.create_table(
        "user_statistics_tracks",
        sa.Column(
            "statistics_id",
            sa.String(length=36),
            sa.ForeignKey("user_statistics.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "track_id",
            sa.String(length=36),
            sa.ForeignKey("top_tracks.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
    )
    op.create_index(
        "ix_user_statistics_tracks_track", "user_statistics_tracks", ["track_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_user_statistics_tracks_track", table_name="user_statistics_tracks")
    op.drop_table("user_statistics_tracks")
    op.drop_index("ix_user_statistics_artists_artist", table_name="user_statistics_artists")
    op.drop_table("user_statistics_artists")
    op.drop_table("user_statistics")
    op.drop_table("user_platforms")
    op.drop_index("ix_top_tracks_user_id", table_name="top_tracks")
    op.drop_table("top_tracks")
    op.drop_index("ix_top_artists_user_id", table_name="top_artists")
    op.drop_table("top_artists")
