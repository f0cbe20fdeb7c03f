"""initial referral schema

Revision ID: 20250730_initial_referral_schema
Revises:
Create Date: 2025-07-30 10:44:02.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20250730_initial_referral_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE TYPE public.app_role AS ENUM ('admin', 'referrer')")
    op.execute(
        "CREATE TYPE public.referral_stage AS ENUM "
        "('Client Signed', 'Site Inspection Done', 'Documents Verified', 'Solar Installed')"
    )
    op.execute("CREATE TYPE public.bonus_status AS ENUM ('Pending', 'Paid')")

    op.execute(
        """
        CREATE TABLE public.profiles (
          id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
          user_id UUID NOT NULL UNIQUE REFERENCES auth.users(id) ON DELETE CASCADE,
          name TEXT NOT NULL,
          bank_details TEXT,
          created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
          updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        """
        CREATE TABLE public.user_roles (
          id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
          user_id UUID NOT NULL REFERENCES auth.users(id) ON DELETE CASCADE,
          role app_role NOT NULL,
          created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
          UNIQUE (user_id, role)
        )
        """
    )
    op.execute(
        """
        CREATE TABLE public.referrals (
          id UUID NOT NULL DEFAULT gen_random_uuid() PRIMARY KEY,
          user_id UUID NOT NULL REFERENCES auth.users(id) ON DELETE CASCADE,
          client_name TEXT NOT NULL,
          client_email TEXT,
          client_phone TEXT,
          client_address TEXT,
          stage referral_stage NOT NULL DEFAULT 'Client Signed',
          bonus_status bonus_status NOT NULL DEFAULT 'Pending',
          notes TEXT,
          created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
          updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
        )
        """
    )
    for table in ("profiles", "user_roles", "referrals"):
        op.execute(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY")

    # Security definer so policies can consult user_roles without recursing
    # into its own policies.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.has_role(_user_id UUID, _role app_role)
        RETURNS BOOLEAN
        LANGUAGE SQL
        STABLE
        SECURITY DEFINER
        AS $$
          SELECT EXISTS (
            SELECT 1
            FROM public.user_roles
            WHERE user_id = _user_id
              AND role = _role
          )
        $$
        """
    )

    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = now();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """
    )
    for table in ("profiles", "referrals"):
        op.execute(
            f"""
            CREATE TRIGGER update_{table}_updated_at
              BEFORE UPDATE ON public.{table}
              FOR EACH ROW
              EXECUTE FUNCTION public.update_updated_at_column()
            """
        )

    # Every new account gets a profile and the referrer role.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.handle_new_user()
        RETURNS TRIGGER
        LANGUAGE plpgsql
        SECURITY DEFINER SET search_path = ''
        AS $$
        BEGIN
          INSERT INTO public.profiles (user_id, name)
          VALUES (NEW.id, COALESCE(NEW.raw_user_meta_data ->> 'name', 'User'));

          INSERT INTO public.user_roles (user_id, role)
          VALUES (NEW.id, 'referrer');

          RETURN NEW;
        END;
        $$
        """
    )
    op.execute(
        """
        CREATE TRIGGER on_auth_user_created
          AFTER INSERT ON auth.users
          FOR EACH ROW
          EXECUTE FUNCTION public.handle_new_user()
        """
    )

    for name, table, command, clause in POLICIES:
        op.execute(
            f'CREATE POLICY "{name}" ON public.{table} FOR {command} {clause}'
        )


def downgrade() -> None:
    for name, table, _, _ in reversed(POLICIES):
        op.execute(f'DROP POLICY IF EXISTS "{name}" ON public.{table}')
    op.execute("DROP TRIGGER IF EXISTS on_auth_user_created ON auth.users")
    op.execute("DROP FUNCTION IF EXISTS public.handle_new_user()")
    op.execute("DROP TABLE IF EXISTS public.referrals")
    op.execute("DROP TABLE IF EXISTS public.user_roles")
    op.execute("DROP TABLE IF EXISTS public.profiles")
    op.execute("DROP FUNCTION IF EXISTS public.update_updated_at_column()")
    op.execute("DROP FUNCTION IF EXISTS public.has_role(UUID, app_role)")
    op.execute("DROP TYPE IF EXISTS public.bonus_status")
    op.execute("DROP TYPE IF EXISTS public.referral_stage")
    op.execute("DROP TYPE IF EXISTS public.app_role")


_OWNER = "USING (auth.uid() = user_id)"
_ADMIN = "USING (public.has_role(auth.uid(), 'admin'))"

# (policy name, table, command, clause)
POLICIES = [
    ("Users can view their own profile", "profiles", "SELECT", _OWNER),
    ("Users can update their own profile", "profiles", "UPDATE", _OWNER),
    ("Admins can view all profiles", "profiles", "SELECT", _ADMIN),
    ("Admins can update all profiles", "profiles", "UPDATE", _ADMIN),
    ("Users can view their own roles", "user_roles", "SELECT", _OWNER),
    ("Admins can view all roles", "user_roles", "SELECT", _ADMIN),
    ("Admins can manage all roles", "user_roles", "ALL", _ADMIN),
    ("Users can view their own referrals", "referrals", "SELECT", _OWNER),
    (
        "Users can create their own referrals",
        "referrals",
        "INSERT",
        "WITH CHECK (auth.uid() = user_id)",
    ),
    ("Users can update their own referrals", "referrals", "UPDATE", _OWNER),
    ("Admins can view all referrals", "referrals", "SELECT", _ADMIN),
    ("Admins can update all referrals", "referrals", "UPDATE", _ADMIN),
    (
        "Admins can create referrals for any user",
        "referrals",
        "INSERT",
        "WITH CHECK (public.has_role(auth.uid(), 'admin'))",
    ),
]
