"""
Image variation job webhook.

A Supabase database webhook posts every new row of the jobs table here.
Pending jobs get their input image sent to the OpenAI image variations
endpoint and the result (or the failure reason) is written back to the row.
"""
