"""
Recipe lifecycle.

Responsibilities:
- Create, update and delete recipes on behalf of their author.
- Share a recipe with another registered user by email.
- Accept ratings from non-authors and keep the running rating.
- Append comments from any authenticated user.
"""
