from __future__ import annotations


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS raffles (
            id uuid PRIMARY KEY,
            title text NOT NULL,
            prize_name text,
            organization_id uuid,
            created_by uuid,
            total_tickets int NOT NULL CHECK (total_tickets > 0),
            numbering_config jsonb NOT NULL DEFAULT '{}'::jsonb,
            status text NOT NULL DEFAULT 'active',
            draw_at timestamptz,
            auto_publish_result boolean NOT NULL DEFAULT false,
            winner_announced boolean NOT NULL DEFAULT false,
            winner_ticket_number text,
            winner_data jsonb,
            created_at timestamptz NOT NULL DEFAULT now(),
            updated_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS raffles_status_draw_at_idx ON raffles (status, draw_at);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS orders (
            id uuid PRIMARY KEY,
            raffle_id uuid NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            status text NOT NULL DEFAULT 'pending',
            ticket_count int NOT NULL CHECK (ticket_count >= 0),
            ticket_ranges jsonb NOT NULL DEFAULT '[]'::jsonb,
            lucky_indices int[] NOT NULL DEFAULT '{}',
            buyer_name text,
            buyer_email text,
            buyer_phone text,
            buyer_city text,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS orders_raffle_status_idx ON orders (raffle_id, status, created_at);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS analytics_events (
            id uuid PRIMARY KEY,
            organization_id uuid,
            raffle_id uuid REFERENCES raffles(id) ON DELETE CASCADE,
            event_type text NOT NULL,
            metadata jsonb NOT NULL DEFAULT '{}'::jsonb,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS notifications (
            id uuid PRIMARY KEY,
            user_id uuid NOT NULL,
            organization_id uuid,
            type text NOT NULL,
            title text NOT NULL,
            message text NOT NULL,
            link text,
            metadata jsonb NOT NULL DEFAULT '{}'::jsonb,
            read boolean NOT NULL DEFAULT false,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS organizations (
            id uuid PRIMARY KEY,
            name text NOT NULL
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS email_outbox (
            id uuid PRIMARY KEY,
            raffle_id uuid REFERENCES raffles(id) ON DELETE CASCADE,
            recipient text NOT NULL,
            template text NOT NULL,
            payload jsonb NOT NULL DEFAULT '{}'::jsonb,
            status text NOT NULL DEFAULT 'pending',
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    conn.commit()
    cur.close()
